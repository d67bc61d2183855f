"""Public Suffix List rule cleaning and parsing."""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, NamedTuple, Tuple

logger = logging.getLogger(__name__)

WILDCARD = "*"
EXCEPTION_PREFIX = "!"
COMMENT_PREFIX = "//"
PRIVATE_SECTION_MARKER = "===BEGIN PRIVATE DOMAINS==="


class RuleParseError(ValueError):
    """A PSL line that is not a normal, wildcard or exception rule."""
    pass


class RuleKind(str, Enum):
    """Rule kind enumeration."""
    NORMAL = "normal"
    WILDCARD = "wildcard"
    EXCEPTION = "exception"


@dataclass(frozen=True)
class Rule:
    """
    One PSL rule.

    ``labels`` are stored left to right without the ``*`` or ``!`` marker,
    so ``*.ck`` is ``Rule(RuleKind.WILDCARD, ("ck",))``.
    """
    kind: RuleKind
    labels: Tuple[str, ...]

    @property
    def text(self) -> str:
        """Render the rule back in PSL syntax."""
        body = ".".join(self.labels)
        if self.kind == RuleKind.WILDCARD:
            return f"{WILDCARD}.{body}" if body else WILDCARD
        if self.kind == RuleKind.EXCEPTION:
            return f"{EXCEPTION_PREFIX}{body}"
        return body


class ParsedRules(NamedTuple):
    """Result of parsing a batch of rule lines."""
    rules: List[Rule]
    rejected: List[Tuple[str, str]]


def clean_psl_text(text: str, include_private: bool = True) -> List[str]:
    """
    Strip comments and blank lines from a raw PSL document.

    Only the first whitespace-delimited token of a rule line is kept, as
    the PSL format requires.

    Args:
        text: Raw ``public_suffix_list.dat`` contents
        include_private: Keep rules from the PRIVATE DOMAINS section

    Returns:
        Rule lines in document order
    """
    lines = []
    for raw in text.splitlines():
        stripped = raw.strip()
        if not stripped:
            continue
        if stripped.startswith(COMMENT_PREFIX):
            if not include_private and PRIVATE_SECTION_MARKER in stripped:
                break
            continue
        lines.append(stripped.split()[0])
    return lines


def parse_rule(line: str) -> Rule:
    """
    Parse one cleaned PSL line.

    Raises:
        RuleParseError: If the line cannot be categorized
    """
    text = line.strip().lower()
    if not text:
        raise RuleParseError("empty rule")
    if any(ch.isspace() for ch in text):
        raise RuleParseError(f"rule contains whitespace: {line!r}")

    kind = RuleKind.NORMAL
    if text.startswith(EXCEPTION_PREFIX):
        kind = RuleKind.EXCEPTION
        text = text[len(EXCEPTION_PREFIX):]

    labels = text.split(".")
    if "" in labels:
        raise RuleParseError(f"empty label in rule: {line!r}")

    if labels[0] == WILDCARD:
        if kind == RuleKind.EXCEPTION:
            raise RuleParseError(f"exception rule cannot be a wildcard: {line!r}")
        kind = RuleKind.WILDCARD
        labels = labels[1:]

    if any(WILDCARD in label for label in labels):
        raise RuleParseError(f"wildcard is only allowed as the leftmost label: {line!r}")

    if kind == RuleKind.EXCEPTION and len(labels) < 2:
        raise RuleParseError(f"exception rule needs at least two labels: {line!r}")

    return Rule(kind=kind, labels=tuple(labels))


def parse_rules(lines: Iterable[str]) -> ParsedRules:
    """
    Parse cleaned PSL lines, skipping the ones that are malformed.

    Duplicates are dropped, first occurrence wins.
    """
    rules: List[Rule] = []
    rejected: List[Tuple[str, str]] = []
    seen = set()

    for line in lines:
        try:
            rule = parse_rule(line)
        except RuleParseError as e:
            logger.warning(f"Skipping malformed PSL rule {line!r}: {e}")
            rejected.append((line, str(e)))
            continue

        if rule not in seen:
            seen.add(rule)
            rules.append(rule)

    return ParsedRules(rules=rules, rejected=rejected)
