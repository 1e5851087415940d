"""Shared test fixtures for specreq.

Provides a scripted terminal that feeds key events to the session driver
and records every rendered frame, sample OpenAPI documents, isolated config
directories, output state management, and a CLI runner. These fixtures are
automatically discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

import contextlib
import json
from collections import deque
from pathlib import Path
from typing import Any, Callable, Iterator, Union

import pytest

from specreq.output import OutputManager, reset_output, set_output
from specreq.session import SessionDriver
from specreq.terminal import Terminal
from specreq.widgets import Key, KeyEvent, PromptState, RenderPayload, Widget

Script = Union[str, Key, KeyEvent]


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, colourless OutputManager for the duration of a test."""
    output = OutputManager(no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Scripted terminal
# ---------------------------------------------------------------------------


def to_events(*script: Script) -> list[KeyEvent]:
    """Expand a script into key events.

    Strings are typed character by character, :class:`Key` members become
    their key event, and :class:`KeyEvent` values pass through.
    """
    events: list[KeyEvent] = []
    for item in script:
        if isinstance(item, KeyEvent):
            events.append(item)
        elif isinstance(item, Key):
            events.append(KeyEvent(item))
        else:
            events.extend(KeyEvent.of(ch) for ch in item)
    return events


class ScriptedTerminal(Terminal):
    """Terminal that replays key events and records what was drawn."""

    def __init__(self, events: list[KeyEvent]):
        self.events = deque(events)
        self.frames: list[tuple[RenderPayload, PromptState]] = []
        self.headings: list[str] = []
        self.sessions = 0
        self.active = False

    @contextlib.contextmanager
    def session(self) -> Iterator[None]:
        assert not self.active, "nested terminal session"
        self.sessions += 1
        self.active = True
        try:
            yield
        finally:
            self.active = False

    def read_key(self) -> KeyEvent:
        if not self.events:
            raise AssertionError("key script exhausted")
        return self.events.popleft()

    def draw(self, payload: RenderPayload, state: PromptState) -> None:
        self.frames.append((payload, state))

    def heading(self, title: str) -> None:
        self.headings.append(title)

    @property
    def last(self) -> tuple[RenderPayload, PromptState]:
        return self.frames[-1]

    def errors(self) -> list[str]:
        """Every distinct error shown, in order, including composite children's."""
        seen: list[str] = []
        for payload, _ in self.frames:
            texts = [payload.error] if payload.error else []
            if payload.body is not None:
                texts += [
                    line[2:] for line in payload.body.plain.split("\n") if line.startswith("✗ ")
                ]
            for text in texts:
                if text not in seen:
                    seen.append(text)
        return seen


@pytest.fixture
def scripted() -> Callable[..., ScriptedTerminal]:
    """Factory: ``scripted("abc", Key.ENTER)`` returns a :class:`ScriptedTerminal`."""

    def factory(*script: Script) -> ScriptedTerminal:
        return ScriptedTerminal(to_events(*script))

    return factory


@pytest.fixture
def run_widget(quiet_output: OutputManager) -> Callable[..., tuple[Any, ScriptedTerminal]]:
    """Factory: run a widget through the session driver against a key script.

    Returns ``(value, terminal)``. Fails the test if the script runs out
    before the widget finishes.
    """

    def runner(widget: Widget, *script: Script) -> tuple[Any, ScriptedTerminal]:
        terminal = ScriptedTerminal(to_events(*script))
        value = SessionDriver(terminal).run(widget)
        return value, terminal

    return runner


# ---------------------------------------------------------------------------
# Sample documents
# ---------------------------------------------------------------------------


@pytest.fixture
def widgets_document() -> dict[str, Any]:
    """A small OpenAPI 3.0 document exercising every parameter location."""
    return {
        "openapi": "3.0.3",
        "info": {"title": "Widgets", "version": "1.0.0"},
        "servers": [{"url": "https://api.example.com/v1"}],
        "paths": {
            "/widgets": {
                "get": {
                    "summary": "List widgets",
                    "parameters": [
                        {"name": "limit", "in": "query", "schema": {"type": "integer"}},
                        {
                            "name": "tags",
                            "in": "query",
                            "schema": {"type": "array", "items": {"type": "string"}},
                        },
                    ],
                },
                "post": {
                    "summary": "Create a widget",
                    "requestBody": {
                        "required": True,
                        "content": {
                            "application/json": {
                                "schema": {"$ref": "#/components/schemas/NewWidget"}
                            }
                        },
                    },
                },
            },
            "/widgets/{id}": {
                "parameters": [{"$ref": "#/components/parameters/WidgetId"}],
                "get": {
                    "summary": "Get a widget",
                    "parameters": [
                        {"name": "verbose", "in": "query", "schema": {"type": "boolean"}},
                        {"name": "X-Trace", "in": "header", "schema": {"type": "string"}},
                        {"name": "session", "in": "cookie", "schema": {"type": "string"}},
                    ],
                },
                "delete": {"summary": "Delete a widget", "deprecated": True},
            },
        },
        "components": {
            "parameters": {
                "WidgetId": {
                    "name": "id",
                    "in": "path",
                    "required": True,
                    "schema": {"type": "integer"},
                }
            },
            "schemas": {
                "NewWidget": {
                    "type": "object",
                    "required": ["name"],
                    "properties": {
                        "name": {"type": "string", "minLength": 1},
                        "size": {"type": "integer", "minimum": 1},
                        "color": {"type": "string", "enum": ["red", "green", "blue"]},
                    },
                }
            },
        },
    }


@pytest.fixture
def widgets_spec_file(tmp_path: Path, widgets_document: dict[str, Any]) -> Path:
    """The widgets document written to a JSON file."""
    path = tmp_path / "widgets.json"
    path.write_text(json.dumps(widgets_document))
    return path


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path
    so that tests never touch real user config, forces the XDG layout,
    clears all SPECREQ_* environment variables and changes the working
    directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("specreq.config._is_xdg_platform", lambda: True)

    for var in ["SPECREQ_PROFILE", "SPECREQ_BASE_URL", "SPECREQ_FORMAT", "NO_COLOR"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    return CliRunner()
