"""Compile the string criteria of a parsed query into regex matchers."""

from __future__ import annotations

import logging
import re

from procfilter.exceptions import MatcherCompileError
from procfilter.query.ast_nodes import (
    And,
    CompiledQuery,
    Group,
    MatcherCriterion,
    Or,
    Prefix,
    Query,
    StringCriterion,
)

logger = logging.getLogger(__name__)


def build_pattern(text: str, *, whole_word: bool, use_regex: bool) -> str:
    """Build the regex source for a string criterion.

    Args:
        text: The user's search text.
        whole_word: Anchor the pattern so it must span the whole field.
        use_regex: Use *text* as a regular expression instead of
            matching it literally.
    """
    body = text if use_regex else re.escape(text)
    if whole_word:
        return f"^{body}$"
    return body


class _Compiler:
    def __init__(
        self, *, whole_word: bool, ignore_case: bool, use_regex: bool, text: str
    ) -> None:
        self.whole_word = whole_word
        self.use_regex = use_regex
        self.flags = re.IGNORECASE if ignore_case else 0
        self.text = text

    def compile_and(self, node: And) -> And:
        return And(tuple(self.compile_or(operand) for operand in node.operands))

    def compile_or(self, node: Or) -> Or:
        return Or(tuple(self.compile_prefix(operand) for operand in node.operands))

    def compile_prefix(self, node: Prefix) -> Prefix:
        if isinstance(node, Group):
            return Group(self.compile_and(node.expression))
        if isinstance(node, StringCriterion) and node.prefix_type.is_string:
            return MatcherCriterion(node.prefix_type, self.compile_matcher(node.pattern))
        # Numeric criteria were fully resolved by the parser.
        return node

    def compile_matcher(self, text: str) -> re.Pattern[str]:
        source = build_pattern(text, whole_word=self.whole_word, use_regex=self.use_regex)
        try:
            return re.compile(source, self.flags)
        except re.error as e:
            raise MatcherCompileError(text, str(e), self.text) from e


def compile_query(
    query: Query,
    *,
    whole_word: bool = False,
    ignore_case: bool = False,
    use_regex: bool = False,
) -> CompiledQuery:
    """Compile every ``name``/``pid`` criterion of *query*.

    The parsed query is left untouched; a new, fully compiled tree is
    returned.

    Raises:
        MatcherCompileError: If a criterion is not a valid regular
            expression. Only possible when *use_regex* is set.
    """
    expression = None
    if query.expression is not None:
        compiler = _Compiler(
            whole_word=whole_word,
            ignore_case=ignore_case,
            use_regex=use_regex,
            text=query.text,
        )
        expression = compiler.compile_and(query.expression)

    logger.debug(
        "Compiled query %r (whole_word=%s, ignore_case=%s, use_regex=%s)",
        query.text,
        whole_word,
        ignore_case,
        use_regex,
    )
    return CompiledQuery(
        expression=expression,
        text=query.text,
        whole_word=whole_word,
        ignore_case=ignore_case,
        use_regex=use_regex,
    )
