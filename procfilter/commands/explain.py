"""Show how a query is parsed and compiled."""

from __future__ import annotations

import re

import click
from rich.markup import escape
from rich.tree import Tree

from procfilter.cli import Context, pass_context
from procfilter.commands._options import build_search_state, search_flag_options
from procfilter.query import (
    And,
    CompiledQuery,
    Group,
    MatcherCriterion,
    NumericCriterion,
    Or,
)
from procfilter.query.ast_nodes import Prefix
from procfilter.utils.output import console, error

EXIT_PARSE_ERROR = 1


def _describe_prefix(node: Prefix) -> str:
    if isinstance(node, MatcherCriterion):
        flags = "i" if node.matcher.flags & re.IGNORECASE else ""
        return (
            f"[query.keyword]{node.prefix_type.value}[/query.keyword] matches "
            f"[query.value]/{escape(node.matcher.pattern)}/{flags}[/query.value]"
        )
    if isinstance(node, NumericCriterion):
        return (
            f"[query.keyword]{node.prefix_type.value}[/query.keyword] "
            f"{node.comparison.value} [query.value]{node.threshold:g}[/query.value]"
        )
    return escape(repr(node))


def _add_and(node: And, parent: Tree) -> None:
    branch = parent.add("[query.keyword]AND[/query.keyword]") if len(node.operands) > 1 else parent
    for operand in node.operands:
        _add_or(operand, branch)


def _add_or(node: Or, parent: Tree) -> None:
    branch = parent.add("[query.keyword]OR[/query.keyword]") if len(node.operands) > 1 else parent
    for operand in node.operands:
        if isinstance(operand, Group):
            _add_and(operand.expression, parent=branch.add("( )"))
        else:
            branch.add(_describe_prefix(operand))


def build_tree(query: CompiledQuery) -> Tree:
    """Render a compiled query as a rich Tree."""
    tree = Tree(f"[bold]{escape(query.text) or 'empty query'}[/bold]")
    if query.expression is None:
        tree.add("matches every process")
    else:
        _add_and(query.expression, tree)
    return tree


@click.command("explain")
@click.argument("query", nargs=-1)
@search_flag_options
@pass_context
def cli(
    ctx: Context,
    query: tuple[str, ...],
    whole_word: bool | None,
    ignore_case: bool | None,
    use_regex: bool | None,
) -> None:
    """Print the parsed form of QUERY without searching.

    Useful to check operator precedence, unit conversion and the final
    regular expressions used for name and PID matching.

    \b
    Examples:
      procfilter explain "a or b and c"
      procfilter explain -w -i "chrome or read > 1GiB"
    """
    state = build_search_state(ctx.config, " ".join(query), whole_word, ignore_case, use_regex)
    if state.is_invalid:
        error(f"Invalid query: {state.error}")
        raise SystemExit(EXIT_PARSE_ERROR)

    console.print(build_tree(state.compiled))
