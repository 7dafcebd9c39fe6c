"""Unit tests for the search widget state."""

from __future__ import annotations

from procfilter.process import ProcessRecord
from procfilter.search_state import SearchState


def _names(records: list[ProcessRecord]) -> list[str]:
    return [r.name for r in records]


class TestSearchState:
    def test_defaults_match_everything(self, sample_records: list[ProcessRecord]) -> None:
        state = SearchState()
        assert state.error is None
        assert state.compiled.is_empty
        assert state.filter(sample_records) == sample_records

    def test_initial_text_is_compiled(self, sample_records: list[ProcessRecord]) -> None:
        state = SearchState(text="cpu > 40")
        assert _names(state.filter(sample_records)) == ["Chrome", "chromedriver"]

    def test_set_query(self, sample_records: list[ProcessRecord]) -> None:
        state = SearchState()
        assert state.set_query("python") is True
        assert _names(state.filter(sample_records)) == ["python3"]

    def test_invalid_query_keeps_previous(self, sample_records: list[ProcessRecord]) -> None:
        state = SearchState()
        state.set_query("python")
        previous = state.compiled

        assert state.set_query("(python") is False
        assert state.is_invalid
        assert state.error == "Missing closing parenthesis"
        assert state.compiled is previous
        assert _names(state.filter(sample_records)) == ["python3"]

    def test_recovery_clears_error(self) -> None:
        state = SearchState(text="cpu >")
        assert state.is_invalid
        assert state.error is not None
        assert state.error.startswith("Failed to parse comparator")

        state.set_query("cpu > 1")
        assert state.error is None
        assert not state.is_invalid

    def test_invalid_initial_text_matches_everything(
        self, sample_records: list[ProcessRecord]
    ) -> None:
        state = SearchState(text=")")
        assert state.error == "Missing opening parenthesis"
        assert len(state.filter(sample_records)) == len(sample_records)

    def test_toggle_whole_word(self, sample_records: list[ProcessRecord]) -> None:
        state = SearchState(text="chrome", ignore_case=True)
        assert _names(state.filter(sample_records)) == ["Chrome", "chromedriver"]

        state.toggle_whole_word()
        assert state.whole_word is True
        assert _names(state.filter(sample_records)) == ["Chrome"]

    def test_toggle_ignore_case(self, sample_records: list[ProcessRecord]) -> None:
        state = SearchState(text="chrome", ignore_case=True)
        state.toggle_ignore_case()
        assert state.ignore_case is False
        assert _names(state.filter(sample_records)) == ["chromedriver"]

    def test_toggle_regex(self, sample_records: list[ProcessRecord]) -> None:
        state = SearchState(text="a.b")
        assert _names(state.filter(sample_records)) == ["a.b"]

        state.toggle_regex()
        assert _names(state.filter(sample_records)) == ["a.b", "axb"]

    def test_toggle_regex_invalid_pattern(self) -> None:
        state = SearchState(text="[abc")
        assert state.error is None

        assert state.toggle_regex() is False
        assert state.error is not None
        assert "[abc" in state.error

        assert state.toggle_regex() is True
        assert state.error is None

    def test_clear(self, sample_records: list[ProcessRecord]) -> None:
        state = SearchState(text="python")
        state.clear()
        assert state.text == ""
        assert state.filter(sample_records) == sample_records

    def test_over_nested_query_sets_error(self, sample_records: list[ProcessRecord]) -> None:
        state = SearchState(text="python")
        assert state.set_query("(" * 300 + "python" + ")" * 300) is False
        assert state.error == "Query is nested too deeply"
        assert _names(state.filter(sample_records)) == ["python3"]
