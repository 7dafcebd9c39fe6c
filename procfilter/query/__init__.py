"""Process query language: tokenizer, parser, matcher compiler, evaluator."""

from __future__ import annotations

from procfilter.query.ast_nodes import (
    And,
    Comparison,
    CompiledQuery,
    Group,
    MatcherCriterion,
    NumericCriterion,
    Or,
    PrefixType,
    Query,
    StringCriterion,
)
from procfilter.query.compiler import compile_query
from procfilter.query.evaluator import check, filter_records
from procfilter.query.parser import parse_query
from procfilter.query.tokenizer import tokenize


def compile_search(
    text: str,
    *,
    whole_word: bool = False,
    ignore_case: bool = False,
    use_regex: bool = False,
) -> CompiledQuery:
    """Parse and compile *text* in one step.

    Raises:
        QueryError: If the query cannot be parsed or compiled.
    """
    return compile_query(
        parse_query(text),
        whole_word=whole_word,
        ignore_case=ignore_case,
        use_regex=use_regex,
    )


__all__ = [
    "And",
    "Comparison",
    "CompiledQuery",
    "Group",
    "MatcherCriterion",
    "NumericCriterion",
    "Or",
    "PrefixType",
    "Query",
    "StringCriterion",
    "check",
    "compile_query",
    "compile_search",
    "filter_records",
    "parse_query",
    "tokenize",
]
