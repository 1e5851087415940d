"""Terminal used by the session driver: key events in, rendered frames out.

Prompts are drawn on **stderr** with a Rich :class:`~rich.live.Live`
display so that stdout only ever carries the formatted request. Keys come
from prompt_toolkit's input layer, which puts the terminal in raw mode
for the session and decodes escape sequences into key presses; they are
mapped onto the widgets' :class:`~specreq.widgets.KeyEvent` here.
"""

from __future__ import annotations

import asyncio
import contextlib
from abc import ABC, abstractmethod
from typing import Iterator, Optional

from prompt_toolkit.input import Input, create_input
from prompt_toolkit.key_binding import KeyPress
from prompt_toolkit.keys import Keys
from rich.console import Console
from rich.live import Live
from rich.text import Text

from specreq.exceptions import PromptError
from specreq.widgets.base import Key, KeyEvent, PromptState, RenderPayload, input_text

# A lone ESC is only known not to start an escape sequence once this many
# seconds pass without further input.
ESCAPE_TIMEOUT = 0.05

_KEYS: dict[Keys, Key] = {
    Keys.Escape: Key.ESC,
    Keys.ControlM: Key.ENTER,
    Keys.ControlJ: Key.ENTER,
    Keys.ControlI: Key.TAB,
    Keys.ControlH: Key.BACKSPACE,
    Keys.Delete: Key.DELETE,
    Keys.Up: Key.UP,
    Keys.Down: Key.DOWN,
    Keys.Left: Key.LEFT,
    Keys.Right: Key.RIGHT,
    Keys.Home: Key.HOME,
    Keys.End: Key.END,
    Keys.PageUp: Key.PAGE_UP,
    Keys.PageDown: Key.PAGE_DOWN,
}


def to_key_event(press: KeyPress) -> Optional[KeyEvent]:
    """Map a decoded key press onto a key event.

    Control chords (``c-w``) become Control events; presses the widgets
    have no use for (function keys, mouse reports, modified arrows)
    yield ``None``.
    """
    key = press.key
    if isinstance(key, Keys):
        if key in _KEYS:
            return KeyEvent(_KEYS[key])
        name = key.value
        if name.startswith("c-") and len(name) == 3 and name[2].isalpha():
            return KeyEvent.control(name[2])
        return None
    if len(key) == 1 and key.isprintable():
        return KeyEvent.of(key)
    return None


def frame(payload: RenderPayload, state: PromptState) -> Text:
    """Render a widget payload as the text shown in the terminal."""
    if state is PromptState.SUBMIT:
        text = Text("✔ ", style="green")
        text.append(payload.message, style="bold")
        if payload.input:
            text.append(" · ", style="dim")
            text.append(payload.input, style="cyan")
    elif state is PromptState.CANCEL:
        text = Text("✗ ", style="red")
        text.append(payload.message, style="bold dim")
    else:
        text = Text("? ", style="cyan")
        text.append(payload.message, style="bold")
        text.append(" ")
        text.append_text(input_text(payload))
        if payload.hint:
            text.append(f"  ({payload.hint})", style="dim")

    if payload.body is not None and payload.body.plain and state is not PromptState.CANCEL:
        for line in payload.body.split("\n"):
            text.append("\n  ")
            text.append_text(line)
    if payload.error and state is PromptState.ACTIVE:
        text.append(f"\n  ✗ {payload.error}", style="red")
    return text


class Terminal(ABC):
    """Event source and renderer the session driver runs widgets against."""

    @abstractmethod
    def session(self) -> contextlib.AbstractContextManager[None]:
        """Acquire the terminal for one widget; released on every exit path."""

    @abstractmethod
    def read_key(self) -> KeyEvent: ...

    @abstractmethod
    def draw(self, payload: RenderPayload, state: PromptState) -> None: ...

    @abstractmethod
    def heading(self, title: str) -> None: ...


class ConsoleTerminal(Terminal):
    """Interactive terminal on stderr.

    Args:
        no_color: Disable colour in prompts.
        console: Console to draw on; defaults to a stderr console.
        input: prompt_toolkit input to read keys from; defaults to the
            controlling terminal, created when a session starts.

    Raises:
        PromptError: From :meth:`session` when stderr is not a terminal.
    """

    def __init__(
        self,
        no_color: bool = False,
        console: Optional[Console] = None,
        input: Optional[Input] = None,
    ):
        self.console = console or Console(stderr=True, no_color=no_color)
        self.input = input
        self._live: Optional[Live] = None
        self._pending: list[KeyEvent] = []

    @contextlib.contextmanager
    def session(self) -> Iterator[None]:
        if not self.console.is_terminal:
            raise PromptError(
                "Cannot prompt: not running in a terminal. "
                "Pass every value on the command line instead."
            )
        if self.input is None:
            try:
                self.input = create_input(always_prefer_tty=True)
            except OSError as exc:
                raise PromptError(f"Failed to open terminal input: {exc}") from exc

        live = Live(console=self.console, auto_refresh=False, transient=False)
        with self.input.raw_mode():
            live.start()
            self._live = live
            try:
                yield
            finally:
                self._live = None
                self._pending.clear()
                live.stop()

    def read_key(self) -> KeyEvent:
        if self.input is None:
            raise PromptError("Cannot read keys outside a terminal session")
        while not self._pending:
            try:
                presses = asyncio.run(self._read_presses())
            except OSError as exc:
                raise PromptError(f"Failed to read from terminal: {exc}") from exc
            if not presses and self.input.closed:
                raise PromptError("Terminal input closed")
            for press in presses:
                event = to_key_event(press)
                if event is not None:
                    self._pending.append(event)
        return self._pending.pop(0)

    async def _read_presses(self) -> list[KeyPress]:
        """Wait for input and return the key presses it decodes to.

        Empty only when the input is closed.
        """
        ready = asyncio.Event()
        with self.input.attach(ready.set):
            while True:
                presses = self.input.read_keys()
                if presses:
                    return presses
                try:
                    await asyncio.wait_for(ready.wait(), ESCAPE_TIMEOUT)
                except asyncio.TimeoutError:
                    presses = self.input.flush_keys()
                    if presses or self.input.closed:
                        return presses
                    await ready.wait()
                ready.clear()

    def draw(self, payload: RenderPayload, state: PromptState) -> None:
        if self._live is None:
            self.console.print(frame(payload, state))
        else:
            self._live.update(frame(payload, state), refresh=True)

    def heading(self, title: str) -> None:
        self.console.print(Text(title, style="bold magenta"))
