"""Search the process table with a query."""

from __future__ import annotations

import dataclasses
import io
import json

import click
from rich.console import Console
from rich.markup import escape

from procfilter.cli import Context, pass_context
from procfilter.commands._options import build_search_state, search_flag_options
from procfilter.config import DEFAULT_COLUMNS, DEFAULT_INTERVAL, DEFAULT_SORT
from procfilter.exceptions import ProcessSourceError
from procfilter.process import ProcessRecord, collect_processes, format_bytes
from procfilter.utils.output import (
    THEME,
    console,
    create_table,
    error,
    info,
    pager_print,
    verbose,
)

EXIT_NO_RESULTS = 0
EXIT_PARSE_ERROR = 1
EXIT_SOURCE_ERROR = 2

# All available columns and their table configuration
# "attr": the ProcessRecord attribute name (for sorting)
COLUMN_DEFS: dict[str, dict] = {
    "pid": {"header": "PID", "style": "process.pid", "justify": "right", "attr": "pid"},
    "name": {"header": "Name", "style": "process.name", "justify": "left", "attr": "name"},
    "cpu": {"header": "CPU%", "style": None, "justify": "right", "attr": "cpu_usage"},
    "mem": {"header": "Mem%", "style": None, "justify": "right", "attr": "mem_usage"},
    "rps": {"header": "R/s", "style": None, "justify": "right", "attr": "rps"},
    "wps": {"header": "W/s", "style": None, "justify": "right", "attr": "wps"},
    "read": {"header": "Read", "style": None, "justify": "right", "attr": "total_read"},
    "write": {"header": "Write", "style": None, "justify": "right", "attr": "total_write"},
}


def _get_cell_value(record: ProcessRecord, col: str) -> str:
    """Get the formatted cell value for a column."""
    if col == "pid":
        return str(record.pid)
    elif col == "name":
        return record.name
    elif col == "cpu":
        return f"{record.cpu_usage:.1f}%"
    elif col == "mem":
        return f"{record.mem_usage:.1f}%"
    elif col == "rps":
        return format_bytes(record.rps, per_second=True)
    elif col == "wps":
        return format_bytes(record.wps, per_second=True)
    elif col == "read":
        return format_bytes(record.total_read)
    elif col == "write":
        return format_bytes(record.total_write)
    return ""


def _parse_sort(sort_col: str) -> tuple[str, bool]:
    """Split a sort spec like ``-cpu`` into (attribute, descending)."""
    descending = sort_col.startswith("-")
    name = sort_col[1:] if descending else sort_col
    if name not in COLUMN_DEFS:
        raise click.BadParameter(
            f"Unknown sort column: {name}. Available: {', '.join(COLUMN_DEFS)}"
        )
    return COLUMN_DEFS[name]["attr"], descending


@click.command("search")
@click.argument("query", nargs=-1)
@search_flag_options
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "pids", "json"]),
    default="table",
    help="Output format (default: table)",
)
@click.option(
    "--limit",
    "-l",
    type=click.IntRange(min=0),
    default=None,
    help="Limit number of results",
)
@click.option(
    "--columns",
    "-C",
    default=None,
    help=f"Comma-separated list of columns to display (default: {DEFAULT_COLUMNS}). "
    f"Available: {', '.join(COLUMN_DEFS.keys())}",
)
@click.option(
    "--sort",
    "-s",
    "sort_col",
    default=None,
    help=f"Sort by column name. Prefix with - for descending (default: {DEFAULT_SORT})",
)
@click.option(
    "--interval",
    type=float,
    default=None,
    help=f"Seconds between process samples (default: {DEFAULT_INTERVAL})",
)
@pass_context
def cli(
    ctx: Context,
    query: tuple[str, ...],
    whole_word: bool | None,
    ignore_case: bool | None,
    use_regex: bool | None,
    output_format: str,
    limit: int | None,
    columns: str | None,
    sort_col: str | None,
    interval: float | None,
) -> None:
    """Show processes matching QUERY.

    QUERY is joined with spaces; without a QUERY every process is shown.

    \b
    Query syntax:
      firefox                  name contains "firefox"
      "cpu"                    quoted keywords are searched as names
      pid 1234 / pid=1234      PID matches
      cpu > 50, mem <= 2.5     CPU / memory percent
      r > 1 MiB, w >= 10KB     read / write bytes per second
      read > 1GB, write = 0    total bytes read / written
      a and b, a && b, a b     both
      a or b, a || b           either
      ( ... )                  grouping; "or" binds tighter than "and"

    \b
    Examples:
      procfilter search "python and cpu > 10"
      procfilter search -r "^kworker/" or "r > 1MiB"
      procfilter search -f pids "mem > 20"
    """
    config = ctx.config
    query_string = " ".join(query)

    columns = columns or (config.columns if config else DEFAULT_COLUMNS)
    col_list = [c.strip() for c in columns.split(",")]
    for c in col_list:
        if c not in COLUMN_DEFS:
            error(f"Unknown column: {c}", hint=f"Available: {', '.join(COLUMN_DEFS.keys())}")
            raise SystemExit(EXIT_PARSE_ERROR)

    try:
        sort_attr, sort_descending = _parse_sort(
            sort_col or (config.sort if config else DEFAULT_SORT)
        )
    except click.BadParameter as e:
        error(e.message)
        raise SystemExit(EXIT_PARSE_ERROR)

    state = build_search_state(config, query_string, whole_word, ignore_case, use_regex)
    if state.is_invalid:
        error(f"Invalid query: {state.error}")
        raise SystemExit(EXIT_PARSE_ERROR)

    if interval is None:
        interval = config.interval if config else DEFAULT_INTERVAL

    try:
        records = collect_processes(interval)
    except ProcessSourceError as e:
        error(str(e))
        raise SystemExit(EXIT_SOURCE_ERROR)

    matches = state.filter(records)
    # pids and json output must stay machine-readable on stdout.
    chatty = output_format == "table" and not ctx.quiet
    if chatty:
        verbose(f"{len(matches)} of {len(records)} processes match")

    matches.sort(key=lambda r: getattr(r, sort_attr), reverse=sort_descending)
    if limit is not None:
        matches = matches[:limit]

    if not matches:
        if output_format == "json":
            click.echo("[]")
        elif chatty:
            info(f"No processes match: {escape(query_string)}")
        raise SystemExit(EXIT_NO_RESULTS)

    if output_format == "table":
        _print_table(matches, query_string, col_list, show_title=not ctx.quiet)
    elif output_format == "pids":
        for record in matches:
            click.echo(record.pid)
    elif output_format == "json":
        click.echo(json.dumps([dataclasses.asdict(r) for r in matches], indent=2))


def _print_table(
    records: list[ProcessRecord],
    query_string: str,
    col_list: list[str],
    *,
    show_title: bool = True,
) -> None:
    """Print results as a Rich table, using pager when appropriate."""
    if show_title:
        title = escape(query_string) if query_string else "all processes"
        info(f"Search: {title} ({len(records)} results)")

    table = create_table(show_header=True, header_style="bold")
    for col in col_list:
        cdef = COLUMN_DEFS[col]
        kwargs: dict = {"justify": cdef["justify"]}
        if cdef["style"]:
            kwargs["style"] = cdef["style"]
        table.add_column(cdef["header"], no_wrap=True, **kwargs)

    for record in records:
        table.add_row(*(escape(_get_cell_value(record, col)) for col in col_list))

    # Render to buffer so we can route through pager
    buf = io.StringIO()
    render_console = Console(
        file=buf,
        theme=THEME,
        force_terminal=not console.no_color,
        width=max(console.width, 80),
        no_color=console.no_color,
    )
    render_console.print(table)
    pager_print(buf.getvalue())
