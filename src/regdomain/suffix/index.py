"""Suffix Index: a label trie over Public Suffix List rules."""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional

from regdomain.suffix.rules import Rule, RuleKind, WILDCARD

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class TrieNode:
    """
    One label position in the trie, reached from the root by a reversed path.

    ``children`` is a read-only mapping. The synthetic wildcard child is
    keyed ``*`` and has ``is_wildcard`` set.
    """
    children: Mapping[str, "TrieNode"] = field(default_factory=lambda: MappingProxyType({}))
    is_rule: bool = False
    is_wildcard: bool = False
    is_exception: bool = False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TrieNode):
            return NotImplemented
        return (
            self.is_rule == other.is_rule
            and self.is_wildcard == other.is_wildcard
            and self.is_exception == other.is_exception
            and dict(self.children) == dict(other.children)
        )

    def child(self, label: str) -> Optional["TrieNode"]:
        return self.children.get(label)

    @property
    def wildcard_child(self) -> Optional["TrieNode"]:
        return self.children.get(WILDCARD)

    def count_nodes(self) -> int:
        return 1 + sum(c.count_nodes() for c in self.children.values())


class _BuildNode:
    """Mutable node used only while an index is being built."""

    __slots__ = ("children", "is_rule", "is_wildcard", "is_exception")

    def __init__(self):
        self.children: Dict[str, "_BuildNode"] = {}
        self.is_rule = False
        self.is_wildcard = False
        self.is_exception = False

    def freeze(self) -> TrieNode:
        children = {label: self.children[label].freeze() for label in sorted(self.children)}
        return TrieNode(
            children=MappingProxyType(children),
            is_rule=self.is_rule,
            is_wildcard=self.is_wildcard,
            is_exception=self.is_exception,
        )


class SuffixIndex:
    """
    Immutable index of PSL rules.

    Built once by :func:`build_index` (or decoded by the persistence layer)
    and then shared read-only by any number of concurrent lookups.
    """

    def __init__(self, root: TrieNode, rule_count: int, built_at: Optional[datetime] = None):
        self._root = root
        self._rule_count = rule_count
        self._node_count = root.count_nodes()
        self._built_at = built_at or datetime.now(timezone.utc)

    @property
    def root(self) -> TrieNode:
        return self._root

    @property
    def rule_count(self) -> int:
        return self._rule_count

    @property
    def node_count(self) -> int:
        return self._node_count

    @property
    def built_at(self) -> datetime:
        return self._built_at

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SuffixIndex):
            return NotImplemented
        return self._root == other._root

    def __repr__(self) -> str:
        return f"SuffixIndex(rules={self._rule_count}, nodes={self._node_count})"


def build_index(rules: Iterable[Rule]) -> SuffixIndex:
    """
    Build a Suffix Index from parsed rules.

    Rule order does not matter: equal rule sets always produce equal tries.
    An empty rule set gives a root-only index, where only the implicit
    ``*`` default rule applies.
    """
    root = _BuildNode()
    distinct = set()

    for rule in rules:
        distinct.add(rule)
        node = root
        for label in reversed(rule.labels):
            node = node.children.setdefault(label, _BuildNode())

        if rule.kind == RuleKind.WILDCARD:
            node = node.children.setdefault(WILDCARD, _BuildNode())
            node.is_wildcard = True
            node.is_rule = True
        elif rule.kind == RuleKind.EXCEPTION:
            node.is_exception = True
        else:
            node.is_rule = True

    index = SuffixIndex(root.freeze(), rule_count=len(distinct))
    logger.info(f"Built suffix index: {index.rule_count} rules, {index.node_count} nodes")
    return index
