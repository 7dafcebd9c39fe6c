"""Options shared by the commands that compile queries."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import click

from procfilter.config import Config
from procfilter.search_state import SearchState


def search_flag_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add the whole-word / ignore-case / regex toggles to a command.

    Each toggle defaults to None so the config file value applies unless
    the flag is given.
    """
    func = click.option(
        "--regex/--no-regex",
        "-r",
        "use_regex",
        default=None,
        help="Treat search text as a regular expression",
    )(func)
    func = click.option(
        "--ignore-case/--case-sensitive",
        "-i/-I",
        "ignore_case",
        default=None,
        help="Match process names regardless of case",
    )(func)
    func = click.option(
        "--whole-word/--no-whole-word",
        "-w",
        "whole_word",
        default=None,
        help="Only match whole process names and PIDs",
    )(func)
    return func


def build_search_state(
    config: Config | None,
    query: str,
    whole_word: bool | None,
    ignore_case: bool | None,
    use_regex: bool | None,
) -> SearchState:
    """Create a SearchState from command-line flags, falling back to config."""
    defaults = config or Config()
    return SearchState(
        text=query,
        whole_word=defaults.whole_word if whole_word is None else whole_word,
        ignore_case=defaults.ignore_case if ignore_case is None else ignore_case,
        use_regex=defaults.use_regex if use_regex is None else use_regex,
    )
