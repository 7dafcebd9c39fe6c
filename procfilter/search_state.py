"""Search widget state: query text, toggles and the current compiled query."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from procfilter.exceptions import QueryError
from procfilter.process import ProcessRecord
from procfilter.query import CompiledQuery, compile_search, filter_records

logger = logging.getLogger(__name__)


@dataclass
class SearchState:
    """State behind a process search box.

    Every change to the text or to one of the toggles recompiles the
    query. A failed compile records the error message and keeps the last
    good query, so the table does not go blank while the user is typing.

    Attributes:
        text: Raw query text as typed.
        whole_word: Match names and PIDs only in full.
        ignore_case: Match names case-insensitively.
        use_regex: Treat search text as a regular expression.
        compiled: Last successfully compiled query.
        error: Message of the last failed compile, or None.
    """

    text: str = ""
    whole_word: bool = False
    ignore_case: bool = True
    use_regex: bool = False
    compiled: CompiledQuery = field(default_factory=lambda: compile_search(""))
    error: str | None = None

    def __post_init__(self) -> None:
        self.recompile()

    @property
    def is_invalid(self) -> bool:
        return self.error is not None

    def recompile(self) -> bool:
        """Compile the current text with the current toggles.

        Returns:
            True if the query compiled, False if ``error`` was set.
        """
        try:
            compiled = compile_search(
                self.text,
                whole_word=self.whole_word,
                ignore_case=self.ignore_case,
                use_regex=self.use_regex,
            )
        except QueryError as e:
            logger.debug("Query %r rejected: %s", self.text, e)
            self.error = e.message
            return False

        self.compiled = compiled
        self.error = None
        return True

    def set_query(self, text: str) -> bool:
        self.text = text
        return self.recompile()

    def clear(self) -> None:
        self.set_query("")

    def toggle_whole_word(self) -> bool:
        self.whole_word = not self.whole_word
        return self.recompile()

    def toggle_ignore_case(self) -> bool:
        self.ignore_case = not self.ignore_case
        return self.recompile()

    def toggle_regex(self) -> bool:
        self.use_regex = not self.use_regex
        return self.recompile()

    def filter(self, records: Iterable[ProcessRecord]) -> list[ProcessRecord]:
        """Return the records matching the current compiled query."""
        return list(filter_records(self.compiled, records))
