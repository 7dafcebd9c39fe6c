"""AST data classes for parsed and compiled process queries."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from procfilter.process import ProcessRecord


class PrefixType(Enum):
    """The process field a criterion constrains."""

    PID = "pid"
    CPU = "cpu"
    MEM = "mem"
    RPS = "r"
    WPS = "w"
    TOTAL_READ = "read"
    TOTAL_WRITE = "write"
    NAME = "name"

    @classmethod
    def from_token(cls, token: str) -> PrefixType:
        """Classify a token, falling back to ``NAME`` for anything unknown."""
        lowered = token.lower()
        for member in cls:
            if member is not cls.NAME and member.value == lowered:
                return member
        return cls.NAME

    @property
    def is_string(self) -> bool:
        return self in (PrefixType.PID, PrefixType.NAME)

    @property
    def accepts_units(self) -> bool:
        """Whether a byte unit suffix may follow the threshold."""
        return self in _BYTE_PREFIXES


_BYTE_PREFIXES = frozenset(
    {PrefixType.RPS, PrefixType.WPS, PrefixType.TOTAL_READ, PrefixType.TOTAL_WRITE}
)


class Comparison(Enum):
    """Numeric comparison operators."""

    EQUAL = "="
    LESS = "<"
    GREATER = ">"
    LESS_OR_EQUAL = "<="
    GREATER_OR_EQUAL = ">="


@dataclass(frozen=True)
class StringCriterion:
    """A raw ``name`` or ``pid`` pattern, not yet compiled."""

    prefix_type: PrefixType
    pattern: str


@dataclass(frozen=True)
class MatcherCriterion:
    """A ``name`` or ``pid`` criterion with its compiled matcher."""

    prefix_type: PrefixType
    matcher: re.Pattern[str]


@dataclass(frozen=True)
class NumericCriterion:
    """A numeric comparison like ``cpu>50`` or ``read>=1GiB``.

    The threshold is already normalized to the field's base unit
    (percent, bytes/s or bytes).
    """

    prefix_type: PrefixType
    comparison: Comparison
    threshold: float


@dataclass(frozen=True)
class Group:
    """A parenthesized sub-expression."""

    expression: And


Prefix = Union[Group, StringCriterion, MatcherCriterion, NumericCriterion]


@dataclass(frozen=True)
class Or:
    """Disjunction of one or more prefixes, evaluated left to right."""

    operands: tuple[Prefix, ...]


@dataclass(frozen=True)
class And:
    """Conjunction of one or more ``Or`` nodes, evaluated left to right."""

    operands: tuple[Or, ...]


@dataclass(frozen=True)
class Query:
    """Top-level parsed query.

    ``expression`` is ``None`` for an empty query string.
    """

    expression: And | None
    text: str = ""


@dataclass(frozen=True)
class CompiledQuery:
    """A query whose string criteria have all been compiled.

    Only compiled queries can be evaluated against process records.
    """

    expression: And | None
    text: str = ""
    whole_word: bool = False
    ignore_case: bool = False
    use_regex: bool = False

    @property
    def is_empty(self) -> bool:
        return self.expression is None

    def check(self, record: ProcessRecord) -> bool:
        """Return whether *record* satisfies this query."""
        from procfilter.query.evaluator import check

        return check(self, record)
