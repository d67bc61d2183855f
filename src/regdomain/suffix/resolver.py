"""Domain Resolver: registrable-domain lookup against a Suffix Index."""
import logging
from typing import List, Optional

from regdomain.suffix.index import SuffixIndex, TrieNode
from regdomain.suffix import persistence

logger = logging.getLogger(__name__)


class IndexNotLoadedError(RuntimeError):
    """Lookup attempted before any Suffix Index was loaded."""

    def __init__(self, message: str = "Suffix index not initialized"):
        super().__init__(message)


def _split(hostname: str) -> List[str]:
    host = hostname.strip().strip(".")
    if not host:
        return []
    return host.split(".")


def _suffix_length(labels: List[str], root: TrieNode) -> int:
    """
    Number of rightmost labels that form the public suffix.

    Walks the labels right to left. A literal child is preferred over the
    wildcard child at the same node. The first exception rule on the path
    prevails and shortens the suffix by one label. When no rule matches, the
    implicit ``*`` rule gives a one-label suffix.
    """
    node = root
    matched = 1

    for depth, label in enumerate(reversed(labels), start=1):
        literal = node.child(label)
        wildcard = node.wildcard_child

        if literal is not None and literal.is_exception:
            return depth - 1

        if (literal is not None and literal.is_rule) or wildcard is not None:
            matched = depth

        node = literal if literal is not None else wildcard
        if node is None:
            break

    return matched


def public_suffix(hostname: str, index: Optional[SuffixIndex]) -> str:
    """Return the public suffix of a normalized hostname, or "" for empty input."""
    if index is None:
        raise IndexNotLoadedError()

    labels = _split(hostname)
    if not labels:
        return ""

    size = min(_suffix_length(labels, index.root), len(labels))
    return ".".join(labels[len(labels) - size:])


def is_public_suffix(hostname: str, index: Optional[SuffixIndex]) -> bool:
    """True when the whole hostname is a public suffix (e.g. ``com`` or ``co.uk``)."""
    if index is None:
        raise IndexNotLoadedError()

    labels = _split(hostname)
    if not labels:
        return False
    return len(labels) <= _suffix_length(labels, index.root)


def lookup(hostname: str, index: Optional[SuffixIndex]) -> str:
    """
    Return the registrable domain (eTLD+1) of a normalized hostname.

    Examples, with ``com``, ``co.uk``, ``*.ck`` and ``!www.ck`` loaded:
        - a.b.example.com -> example.com
        - www.example.co.uk -> example.co.uk
        - foo.bar.ck -> foo.bar.ck
        - foo.www.ck -> www.ck

    If the whole hostname is itself a public suffix (``com``) it is
    returned as matched, without surrounding whitespace or dots; callers must not treat that as registrable.

    Args:
        hostname: Lowercase hostname without scheme, path or leading ``www.``
        index: Suffix Index to match against

    Returns:
        Registrable domain, or "" for empty input

    Raises:
        IndexNotLoadedError: If no index is given
    """
    if index is None:
        raise IndexNotLoadedError()

    labels = _split(hostname)
    if not labels:
        return ""

    size = _suffix_length(labels, index.root) + 1
    if len(labels) < size:
        return ".".join(labels)

    return ".".join(labels[len(labels) - size:])


class DomainResolver:
    """
    Holds the current Suffix Index and answers lookups against it.

    The index reference is replaced in a single assignment by :meth:`swap`,
    so lookups already running keep the index they started with.
    """

    def __init__(self, index: Optional[SuffixIndex] = None):
        self._index = index

    @property
    def is_loaded(self) -> bool:
        return self._index is not None

    @property
    def index(self) -> SuffixIndex:
        index = self._index
        if index is None:
            raise IndexNotLoadedError()
        return index

    def swap(self, index: SuffixIndex) -> Optional[SuffixIndex]:
        """Install a new index and return the previous one."""
        previous, self._index = self._index, index
        logger.info(f"Suffix index swapped in: {index.rule_count} rules")
        return previous

    def load_bytes(self, data: bytes) -> SuffixIndex:
        """
        Decode a persisted index and swap it in.

        Raises:
            IndexDecodeError: If the bytes are corrupt; the current index stays
        """
        index = persistence.load(data)
        self.swap(index)
        return index

    def lookup(self, hostname: str) -> str:
        return lookup(hostname, self._index)

    def public_suffix(self, hostname: str) -> str:
        return public_suffix(hostname, self._index)

    def is_public_suffix(self, hostname: str) -> bool:
        return is_public_suffix(hostname, self._index)
