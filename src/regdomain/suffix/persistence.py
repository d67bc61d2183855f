"""Binary persistence for a built Suffix Index."""
import json
import logging
import os
import tempfile
import zlib
from datetime import datetime
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Union

from pydantic import BaseModel, Field, ValidationError

from regdomain.suffix.index import SuffixIndex, TrieNode

logger = logging.getLogger(__name__)

MAGIC = b"RDIX"
FORMAT_VERSION = 1


class IndexDecodeError(ValueError):
    """Persisted index bytes are corrupt, truncated or of an unknown format."""
    pass


class NodeDocument(BaseModel):
    """Serialized trie node. Short field names keep the payload small."""
    r: bool = Field(False, description="Rule terminal")
    w: bool = Field(False, description="Wildcard child")
    e: bool = Field(False, description="Exception rule")
    c: Dict[str, "NodeDocument"] = Field(default_factory=dict)


class IndexDocument(BaseModel):
    """Top-level serialized index."""
    rule_count: int = Field(..., ge=0)
    built_at: datetime
    root: NodeDocument


def _dump_node(node: TrieNode) -> dict:
    doc = {}
    if node.is_rule:
        doc["r"] = True
    if node.is_wildcard:
        doc["w"] = True
    if node.is_exception:
        doc["e"] = True
    if node.children:
        doc["c"] = {label: _dump_node(child) for label, child in node.children.items()}
    return doc


def _load_node(doc: NodeDocument) -> TrieNode:
    children = {label: _load_node(child) for label, child in sorted(doc.c.items())}
    return TrieNode(
        children=MappingProxyType(children),
        is_rule=doc.r,
        is_wildcard=doc.w,
        is_exception=doc.e,
    )


def save(index: SuffixIndex) -> bytes:
    """Serialize an index. Equal tries built at the same time give equal bytes."""
    document = {
        "rule_count": index.rule_count,
        "built_at": index.built_at.isoformat(),
        "root": _dump_node(index.root),
    }
    payload = json.dumps(document, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return MAGIC + bytes([FORMAT_VERSION]) + zlib.compress(payload.encode("utf-8"), 9)


def load(data: bytes) -> SuffixIndex:
    """
    Deserialize an index written by :func:`save`.

    Raises:
        IndexDecodeError: If the data cannot be decoded
    """
    header = len(MAGIC) + 1
    if len(data) < header or not data.startswith(MAGIC):
        raise IndexDecodeError("Not a suffix index (bad magic)")

    version = data[len(MAGIC)]
    if version != FORMAT_VERSION:
        raise IndexDecodeError(f"Unsupported index format version: {version}")

    try:
        payload = zlib.decompress(data[header:])
        document = IndexDocument.model_validate_json(payload)
    except zlib.error as e:
        raise IndexDecodeError(f"Corrupt index payload: {e}") from e
    except ValidationError as e:
        raise IndexDecodeError(f"Invalid index document: {e.error_count()} errors") from e

    return SuffixIndex(
        _load_node(document.root),
        rule_count=document.rule_count,
        built_at=document.built_at,
    )


def save_to_file(index: SuffixIndex, path: Union[str, Path]) -> None:
    """Write an index to disk, replacing any existing file atomically."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    data = save(index)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=target.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        # mkstemp creates 0600; the API may run as another user
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info(f"Saved suffix index to {target} ({len(data)} bytes)")


def load_from_file(path: Union[str, Path]) -> SuffixIndex:
    """
    Read an index written by :func:`save_to_file`.

    Raises:
        FileNotFoundError: If the file does not exist
        IndexDecodeError: If the file is corrupt
    """
    data = Path(path).read_bytes()
    index = load(data)
    logger.info(f"Loaded suffix index from {path}: {index.rule_count} rules")
    return index
