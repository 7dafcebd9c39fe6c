"""Evaluate compiled queries against process records."""

from __future__ import annotations

import operator
import sys
from collections.abc import Callable, Iterable, Iterator
from typing import TYPE_CHECKING

from procfilter.query.ast_nodes import (
    And,
    Comparison,
    CompiledQuery,
    Group,
    MatcherCriterion,
    NumericCriterion,
    Or,
    Prefix,
    PrefixType,
)

if TYPE_CHECKING:
    from procfilter.process import ProcessRecord


def _approx_equal(lhs: float, rhs: float) -> bool:
    return abs(lhs - rhs) < sys.float_info.epsilon


_COMPARATORS: dict[Comparison, Callable[[float, float], bool]] = {
    Comparison.EQUAL: _approx_equal,
    Comparison.LESS: operator.lt,
    Comparison.GREATER: operator.gt,
    Comparison.LESS_OR_EQUAL: operator.le,
    Comparison.GREATER_OR_EQUAL: operator.ge,
}

# Record attribute compared by each numeric prefix.
_NUMERIC_FIELDS: dict[PrefixType, str] = {
    PrefixType.CPU: "cpu_usage",
    PrefixType.MEM: "mem_usage",
    PrefixType.RPS: "rps",
    PrefixType.WPS: "wps",
    PrefixType.TOTAL_READ: "total_read",
    PrefixType.TOTAL_WRITE: "total_write",
}


def compare(comparison: Comparison, value: float, threshold: float) -> bool:
    """Compare a record value against a threshold.

    ``EQUAL`` tolerates a difference below machine epsilon; the ordering
    operators compare exactly.
    """
    return _COMPARATORS[comparison](value, threshold)


def _check_and(node: And, record: ProcessRecord) -> bool:
    return all(_check_or(operand, record) for operand in node.operands)


def _check_or(node: Or, record: ProcessRecord) -> bool:
    return any(_check_prefix(operand, record) for operand in node.operands)


def _check_prefix(node: Prefix, record: ProcessRecord) -> bool:
    if isinstance(node, Group):
        return _check_and(node.expression, record)

    if isinstance(node, MatcherCriterion):
        if node.prefix_type is PrefixType.NAME:
            return node.matcher.search(record.name) is not None
        if node.prefix_type is PrefixType.PID:
            return node.matcher.search(str(record.pid)) is not None
        return True

    if isinstance(node, NumericCriterion):
        field = _NUMERIC_FIELDS.get(node.prefix_type)
        if field is None:
            return True
        return compare(node.comparison, getattr(record, field), node.threshold)

    # Anything else cannot be evaluated; let the record through.
    return True


def check(query: CompiledQuery, record: ProcessRecord) -> bool:
    """Return whether *record* satisfies *query*.

    An empty query matches every record. Never raises for a query
    produced by ``compile_query``.
    """
    if query.expression is None:
        return True
    return _check_and(query.expression, record)


def filter_records(
    query: CompiledQuery, records: Iterable[ProcessRecord]
) -> Iterator[ProcessRecord]:
    """Yield the records matching *query*, preserving input order."""
    for record in records:
        if check(query, record):
            yield record
