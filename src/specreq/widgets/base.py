"""Widget protocol shared by every interactive prompt.

A widget collects exactly one value. Its life cycle is::

    (constructed) --initialize()--> ACTIVE --handle(event)*--> SUBMIT | CANCEL | FATAL

* :meth:`Widget.initialize` performs setup that can fail (compiling a child
  widget, compiling a regular expression) and returns the initial state.
* :meth:`Widget.handle` consumes one key event and returns the next state.
* :meth:`Widget.render` describes the widget as a :class:`RenderPayload`
  without mutating it, so it can be called after every event.
* :meth:`Widget.validate` checks the pending value before a SUBMIT is
  accepted and raises :class:`~specreq.exceptions.ValidationError`.
* :meth:`Widget.submit` returns the collected value.

Which keys mean "skip" and "abort" is decided once, by a :class:`Controls`
value passed to every widget at construction time.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from rich.text import Text


class PromptState(str, enum.Enum):
    """States returned by :meth:`Widget.initialize` and :meth:`Widget.handle`."""

    ACTIVE = "active"
    SUBMIT = "submit"
    CANCEL = "cancel"
    FATAL = "fatal"


class Key(str, enum.Enum):
    """Logical keys produced by the terminal's key decoder."""

    CHAR = "char"
    ENTER = "enter"
    ESC = "esc"
    BACKSPACE = "backspace"
    DELETE = "delete"
    TAB = "tab"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    HOME = "home"
    END = "end"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"


@dataclass(frozen=True)
class KeyEvent:
    """One discrete input event.

    ``char`` is only set for :attr:`Key.CHAR`; ``ctrl`` marks a Control
    chord such as Ctrl-C (``KeyEvent(Key.CHAR, "c", ctrl=True)``).
    """

    key: Key
    char: str = ""
    ctrl: bool = False

    @classmethod
    def of(cls, char: str) -> KeyEvent:
        return cls(Key.CHAR, char)

    @classmethod
    def control(cls, char: str) -> KeyEvent:
        return cls(Key.CHAR, char, ctrl=True)

    def is_char(self) -> bool:
        """``True`` for a printable character typed without Control."""
        return self.key is Key.CHAR and not self.ctrl


@dataclass(frozen=True)
class Controls:
    """The global skip/abort key convention.

    Leaf widgets treat both keys as Cancel. Composite widgets treat the
    abort key as their own Cancel and let the skip key reach the active
    child. :class:`~specreq.widgets.skippable.Skippable` intercepts the
    skip key and turns it into "no value".
    """

    skip: KeyEvent = KeyEvent(Key.ESC)
    abort: KeyEvent = KeyEvent(Key.CHAR, "c", ctrl=True)

    def is_skip(self, event: KeyEvent) -> bool:
        return event == self.skip

    def is_abort(self, event: KeyEvent) -> bool:
        return event == self.abort

    def is_cancel(self, event: KeyEvent) -> bool:
        return self.is_skip(event) or self.is_abort(event)

    @property
    def skip_label(self) -> str:
        return _key_label(self.skip)


DEFAULT_CONTROLS = Controls()


def _key_label(event: KeyEvent) -> str:
    if event.key is Key.CHAR:
        return f"<Ctrl-{event.char.upper()}>" if event.ctrl else f"<{event.char}>"
    return f"<{event.key.value.replace('_', ' ').title()}>"


@dataclass
class RenderPayload:
    """What a widget looks like right now.

    Attributes:
        message: The prompt label.
        hint: Dim helper text shown after the label.
        input: The current input line (already masked for passwords).
        cursor: Cursor offset within ``input``; ``None`` hides the cursor.
        placeholder: Shown dimmed while ``input`` is empty.
        body: Extra lines under the input (options, calendar, children).
        error: Validation or composite error to show under the widget.
    """

    message: str
    hint: Optional[str] = None
    input: str = ""
    cursor: Optional[int] = None
    placeholder: Optional[str] = None
    body: Optional[Text] = None
    error: Optional[str] = None


def input_text(payload: RenderPayload) -> Text:
    """Render a payload's input line, showing the cursor as a reversed cell."""
    if not payload.input and payload.placeholder:
        return Text(payload.placeholder, style="dim")
    text = Text(payload.input)
    if payload.cursor is not None:
        if payload.cursor >= len(payload.input):
            text.append(" ", style="reverse")
        else:
            text.stylize("reverse", payload.cursor, payload.cursor + 1)
    return text


def inline(payload: RenderPayload, label: str) -> Text:
    """Render a child widget's payload as lines inside a composite's body."""
    line = Text(f"{label}: ", style="bold")
    line.append_text(input_text(payload))
    if payload.hint:
        line.append(f"  {payload.hint}", style="dim")
    if payload.body is not None and payload.body.plain:
        line.append("\n")
        line.append_text(payload.body)
    if payload.error:
        line.append(f"\n✗ {payload.error}", style="red")
    return line


class Widget(ABC):
    """Base class for every prompt widget.

    Args:
        message: Label shown for the prompt.
        description: Optional description, rendered as the hint.
        controls: Skip/abort key convention.
    """

    def __init__(
        self,
        message: str,
        description: Optional[str] = None,
        controls: Controls = DEFAULT_CONTROLS,
    ):
        self.message = message
        self.description = description
        self.controls = controls
        self.error: Optional[str] = None

    def initialize(self) -> PromptState:
        """Prepare the widget. Returns the initial state (normally ACTIVE)."""
        return PromptState.ACTIVE

    def handle(self, event: KeyEvent) -> PromptState:
        """Consume one key event and return the next state.

        The widget's pending error is cleared first; ``_handle`` may set a
        new one.
        """
        self.error = None
        return self._handle(event)

    @abstractmethod
    def _handle(self, event: KeyEvent) -> PromptState: ...

    @abstractmethod
    def render(self, state: PromptState) -> RenderPayload: ...

    def validate(self) -> None:
        """Check the pending value.

        Raises:
            ValidationError: If the value breaks a declared facet.
        """

    @abstractmethod
    def submit(self) -> Any: ...
