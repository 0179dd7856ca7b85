"""Match rules that decide whether a product page shows the item in stock.

A rule is one of four kinds, stored in YAML as a single-key mapping:

    - regex: "In stock: [1-9]"
    - notRegex: "(?i)unavailable"
    - contains: Add to Cart
    - doesNotContain: Sold Out

An item is in stock when every one of its rules holds for the page body.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional


class MatchKind(str, enum.Enum):
    REGEX = "regex"
    NOT_REGEX = "notRegex"
    CONTAINS = "contains"
    DOES_NOT_CONTAIN = "doesNotContain"


# Alternate spellings accepted when loading.
_TAG_ALIASES = {
    "negatedRegex": MatchKind.NOT_REGEX,
}


@dataclass(frozen=True)
class MatchRule:
    kind: MatchKind
    value: str
    _pattern: Optional[re.Pattern] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise ValueError(f"{self.kind.value} rule needs a string, got {type(self.value).__name__}")
        if self.kind in (MatchKind.REGEX, MatchKind.NOT_REGEX):
            try:
                compiled = re.compile(self.value)
            except re.error as e:
                raise ValueError(f"Invalid {self.kind.value} pattern {self.value!r}: {e}") from e
            object.__setattr__(self, "_pattern", compiled)

    @classmethod
    def from_mapping(cls, data: Mapping) -> "MatchRule":
        if not isinstance(data, Mapping) or len(data) != 1:
            raise ValueError(f"Match rule must be a single-key mapping, got {data!r}")
        (tag, value), = data.items()
        kind = _TAG_ALIASES.get(tag)
        if kind is None:
            try:
                kind = MatchKind(tag)
            except ValueError:
                raise ValueError(f"Unknown match rule {tag!r}") from None
        return cls(kind, value)

    def to_mapping(self) -> dict:
        return {self.kind.value: self.value}


def evaluate(rule: MatchRule, body: str) -> bool:
    """Return whether a single rule holds for ``body``."""
    if rule.kind is MatchKind.REGEX:
        return rule._pattern.search(body) is not None
    if rule.kind is MatchKind.NOT_REGEX:
        return rule._pattern.search(body) is None
    if rule.kind is MatchKind.CONTAINS:
        return rule.value in body
    if rule.kind is MatchKind.DOES_NOT_CONTAIN:
        return rule.value not in body
    raise ValueError(f"Unhandled match kind {rule.kind!r}")


def evaluate_all(rules: Iterable[MatchRule], body: str) -> bool:
    """Conjunction of ``rules`` in declared order; no rules means in stock."""
    return all(evaluate(rule, body) for rule in rules)


__all__ = ["MatchKind", "MatchRule", "evaluate", "evaluate_all"]
