"""Tests for specreq.widgets.select."""

from __future__ import annotations

import pytest

from specreq.exceptions import PromptCancelled, PromptError
from specreq.widgets import Key, KeyEvent, PromptState, Select, SelectOption
from specreq.widgets.select import matches


def _options(*labels: str) -> list[SelectOption]:
    return [SelectOption(label, label.lower()) for label in labels]


class TestMatches:
    @pytest.mark.parametrize(
        ("pattern", "label", "expected"),
        [
            ("", "anything", True),
            ("gpt", "GET /pets", True),
            ("PETS", "/pets/{id}", True),
            ("tp", "/pets", False),
            ("xyz", "/pets", False),
        ],
    )
    def test_subsequence(self, pattern: str, label: str, expected: bool) -> None:
        assert matches(pattern, label) is expected


class TestSelect:
    def test_enter_picks_first(self, run_widget) -> None:
        value, _ = run_widget(Select("color", _options("Red", "Green")), Key.ENTER)
        assert value == "red"

    def test_arrows_move_and_clamp(self, run_widget) -> None:
        script = (Key.DOWN, Key.DOWN, Key.DOWN, Key.UP, Key.ENTER)
        value, _ = run_widget(Select("color", _options("Red", "Green", "Blue")), *script)
        assert value == "green"

    def test_emacs_motions(self, run_widget) -> None:
        script = (KeyEvent.control("n"), KeyEvent.control("n"), KeyEvent.control("p"), Key.ENTER)
        value, _ = run_widget(Select("color", _options("Red", "Green", "Blue")), *script)
        assert value == "green"

    def test_default_preselected(self, run_widget) -> None:
        widget = Select("color", _options("Red", "Green", "Blue"), default="blue")
        value, _ = run_widget(widget, Key.ENTER)
        assert value == "blue"

    def test_filter_narrows_options(self, run_widget) -> None:
        widget = Select("path", _options("/pets", "/pets/{id}", "/stores"))
        value, terminal = run_widget(widget, "sto", Key.ENTER)
        assert value == "/stores"
        payload, _ = terminal.frames[-2]
        assert payload.input == "sto"
        assert payload.body.plain == "› /stores"

    def test_no_matches_reports_error(self, run_widget) -> None:
        widget = Select("path", _options("/pets"))
        value, terminal = run_widget(widget, "zz", Key.ENTER, Key.BACKSPACE, Key.BACKSPACE, Key.ENTER)
        assert value == "/pets"
        assert terminal.errors() == ["No matches found"]
        assert any(p.body.plain == "<No matches found>" for p, _ in terminal.frames if p.body)

    def test_pagination(self, run_widget) -> None:
        labels = [f"op{i:02d}" for i in range(20)]
        widget = Select("op", _options(*labels), page_size=8)
        value, terminal = run_widget(widget, Key.PAGE_DOWN, Key.PAGE_DOWN, Key.PAGE_DOWN, Key.ENTER)
        assert value == "op19"
        payload, _ = terminal.frames[-2]
        assert "page 3/3" in payload.body.plain
        assert payload.body.plain.count("\n") == 4

    def test_hints_rendered(self) -> None:
        widget = Select("method", [SelectOption("GET", "get", "List pets")])
        assert widget.render(PromptState.ACTIVE).body.plain == "› GET  List pets"

    def test_cancel(self, run_widget) -> None:
        with pytest.raises(PromptCancelled):
            run_widget(Select("color", _options("Red")), Key.ESC)

    def test_no_options(self) -> None:
        with pytest.raises(PromptError, match="No options"):
            Select("empty", []).initialize()

    def test_submitted_render_shows_label(self) -> None:
        widget = Select("color", _options("Red"))
        assert widget.render(PromptState.SUBMIT).input == "Red"
