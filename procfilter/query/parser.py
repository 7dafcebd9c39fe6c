"""Recursive-descent parser for the process query language.

Grammar (keywords and prefixes are case-insensitive)::

    query      := and
    and        := or ( ("and" | "&&")? or )*
    or         := prefix ( ("or" | "||") prefix )*
    prefix     := "(" and ")" | criterion
    criterion  := "pid" "="? TEXT
                | ("cpu" | "mem") cmp NUMBER
                | ("r" | "w" | "read" | "write") cmp NUMBER UNIT?
                | ("r" | "w" | "read" | "write") cmp NUMBER+UNIT
                | TEXT
    cmp        := "=" | ">" | ">" "=" | "<" | "<" "="

Two operands with no combinator between them are joined with an
implicit AND.
"""

from __future__ import annotations

import logging
import re
from collections import deque
from collections.abc import Iterable

from procfilter.exceptions import (
    ComparatorParseError,
    MissingClosingParenError,
    MissingOpeningParenError,
    QueryError,
)
from procfilter.query.ast_nodes import (
    And,
    Comparison,
    Group,
    NumericCriterion,
    Or,
    Prefix,
    PrefixType,
    Query,
    StringCriterion,
)
from procfilter.query.tokenizer import DELIMITERS, tokenize

logger = logging.getLogger(__name__)

AND_KEYWORDS: frozenset[str] = frozenset({"and", "&&"})
OR_KEYWORDS: frozenset[str] = frozenset({"or", "||"})

# Byte unit suffixes accepted after r/w/read/write thresholds (case-sensitive).
UNIT_MULTIPLIERS: dict[str, float] = {
    "TB": 1_000_000_000_000.0,
    "TiB": 1_099_511_627_776.0,
    "GB": 1_000_000_000.0,
    "GiB": 1_073_741_824.0,
    "MB": 1_000_000.0,
    "MiB": 1_048_576.0,
    "KB": 1_000.0,
    "KiB": 1_024.0,
    "B": 1.0,
}

# Parenthesized groups may nest this deep. The compiler and evaluator
# recurse once per level, so this also bounds their stack use.
MAX_NESTING_DEPTH = 100

# "1GiB" written without a space between number and unit.
_ATTACHED_UNIT_RE = re.compile(
    r"(?P<number>.+?)(?P<unit>{})".format("|".join(UNIT_MULTIPLIERS))
)


class _Parser:
    """Consumes a token queue front to back."""

    def __init__(self, tokens: Iterable[str], text: str) -> None:
        self._tokens: deque[str] = deque(tokens)
        self._text = text
        self._depth = 0

    @property
    def exhausted(self) -> bool:
        return not self._tokens

    def _peek(self) -> str | None:
        return self._tokens[0] if self._tokens else None

    def _pop(self) -> str | None:
        return self._tokens.popleft() if self._tokens else None

    def parse_and(self) -> And:
        operands = [self.parse_or()]
        while (token := self._peek()) is not None:
            if token == ")":
                break
            if token.lower() in AND_KEYWORDS:
                self._pop()
            operands.append(self.parse_or())
        return And(tuple(operands))

    def parse_or(self) -> Or:
        operands = [self.parse_prefix()]
        while (token := self._peek()) is not None and token.lower() in OR_KEYWORDS:
            self._pop()
            operands.append(self.parse_prefix())
        return Or(tuple(operands))

    def parse_prefix(self) -> Prefix:
        token = self._pop()
        if token is None:
            raise ComparatorParseError("query ended unexpectedly", self._text)

        if token == "(":
            self._depth += 1
            if self._depth > MAX_NESTING_DEPTH:
                raise QueryError("Query is nested too deeply", self._text)
            expression = self.parse_and()
            if self._pop() != ")":
                raise MissingClosingParenError(self._text)
            self._depth -= 1
            return Group(expression)
        if token == ")":
            raise MissingOpeningParenError(self._text)

        prefix_type = PrefixType.from_token(token)
        if prefix_type is PrefixType.NAME:
            # The token itself is the search text; quoting a keyword
            # ("cpu") turns it into a plain name search.
            return StringCriterion(prefix_type, token.strip('"'))
        if prefix_type is PrefixType.PID:
            return self._parse_pid()
        return self._parse_numeric(prefix_type)

    def _parse_pid(self) -> StringCriterion:
        content = self._pop()
        if content == "=":
            content = self._pop()
        if content is None or content in DELIMITERS:
            raise ComparatorParseError("expected a PID after 'pid'", self._text)
        return StringCriterion(PrefixType.PID, content)

    def _parse_numeric(self, prefix_type: PrefixType) -> NumericCriterion:
        keyword = prefix_type.value
        operator = self._pop()
        if operator == "=":
            comparison = Comparison.EQUAL
            value = self._pop()
        elif operator in (">", "<"):
            value = self._pop()
            if value == "=":
                comparison = (
                    Comparison.GREATER_OR_EQUAL if operator == ">" else Comparison.LESS_OR_EQUAL
                )
                value = self._pop()
            else:
                comparison = Comparison.GREATER if operator == ">" else Comparison.LESS
        else:
            raise ComparatorParseError(f"expected '=', '<' or '>' after '{keyword}'", self._text)

        if value is None:
            raise ComparatorParseError(f"missing value after '{keyword}'", self._text)

        unit = None
        if prefix_type.accepts_units and (match := _ATTACHED_UNIT_RE.fullmatch(value)):
            value, unit = match["number"], match["unit"]
        try:
            threshold = float(value)
        except ValueError:
            raise ComparatorParseError(f"'{value}' is not a number", self._text) from None

        if unit is None and prefix_type.accepts_units and self._peek() in UNIT_MULTIPLIERS:
            unit = self._pop()
        if unit is not None:
            threshold *= UNIT_MULTIPLIERS[unit]

        return NumericCriterion(prefix_type, comparison, threshold)


def parse_tokens(tokens: Iterable[str], text: str = "") -> Query:
    """Parse an already tokenized query.

    Raises:
        QueryError: If the tokens do not form a valid query.
    """
    parser = _Parser(tokens, text)
    if parser.exhausted:
        return Query(expression=None, text=text)

    expression = parser.parse_and()

    # parse_and only stops early on a ")" that no group is waiting for.
    if not parser.exhausted:
        raise MissingOpeningParenError(text)

    return Query(expression=expression, text=text)


def parse_query(text: str) -> Query:
    """Parse a process query string into an AST.

    An empty or whitespace-only string parses to a query with no
    expression, which matches every process.

    Args:
        text: The raw query text.

    Returns:
        The parsed Query. String criteria are still raw patterns;
        pass the result to ``compile_query`` before evaluating it.

    Raises:
        QueryError: If the query cannot be parsed.
    """
    query = parse_tokens(tokenize(text), text)
    logger.debug("Parsed query %r: %s", text, query.expression)
    return query
