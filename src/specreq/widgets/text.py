"""Free-form single-line text input."""

from __future__ import annotations

from typing import Optional

from specreq.widgets.base import (
    Controls,
    DEFAULT_CONTROLS,
    Key,
    KeyEvent,
    PromptState,
    RenderPayload,
    Widget,
)


class TextBuffer:
    """An editable line of text with a cursor.

    Supports the usual readline-style motions: arrows, Home/End (and
    Ctrl-A/Ctrl-E), Backspace/Delete, Ctrl-U (clear to start of line) and
    Ctrl-W (delete the word before the cursor).
    """

    def __init__(self, value: str = ""):
        self.value = value
        self.cursor = len(value)

    def insert(self, text: str) -> None:
        self.value = self.value[: self.cursor] + text + self.value[self.cursor :]
        self.cursor += len(text)

    def backspace(self) -> None:
        if self.cursor > 0:
            self.value = self.value[: self.cursor - 1] + self.value[self.cursor :]
            self.cursor -= 1

    def delete(self) -> None:
        self.value = self.value[: self.cursor] + self.value[self.cursor + 1 :]

    def delete_word(self) -> None:
        start = self.cursor
        while start > 0 and self.value[start - 1] == " ":
            start -= 1
        while start > 0 and self.value[start - 1] != " ":
            start -= 1
        self.value = self.value[:start] + self.value[self.cursor :]
        self.cursor = start

    def delete_line(self) -> None:
        self.value = self.value[self.cursor :]
        self.cursor = 0

    def edit(self, event: KeyEvent) -> bool:
        """Apply an editing key. Returns ``False`` if the key is not an edit."""
        if event.is_char():
            self.insert(event.char)
        elif event.key is Key.BACKSPACE or event == KeyEvent.control("h"):
            self.backspace()
        elif event.key is Key.DELETE or event == KeyEvent.control("d"):
            self.delete()
        elif event.key is Key.LEFT or event == KeyEvent.control("b"):
            self.cursor = max(0, self.cursor - 1)
        elif event.key is Key.RIGHT or event == KeyEvent.control("f"):
            self.cursor = min(len(self.value), self.cursor + 1)
        elif event.key is Key.HOME or event == KeyEvent.control("a"):
            self.cursor = 0
        elif event.key is Key.END or event == KeyEvent.control("e"):
            self.cursor = len(self.value)
        elif event == KeyEvent.control("u"):
            self.delete_line()
        elif event == KeyEvent.control("w"):
            self.delete_word()
        else:
            return False
        return True


class TextInput(Widget):
    """Line-editing widget that submits on Enter.

    Subclasses convert and validate :attr:`text`; this class only handles
    editing and the cancel keys.

    Args:
        message: Prompt label.
        description: Shown as the hint.
        default: Pre-filled text.
        controls: Skip/abort key convention.
    """

    mask: Optional[str] = None

    def __init__(
        self,
        message: str,
        description: Optional[str] = None,
        default: Optional[str] = None,
        controls: Controls = DEFAULT_CONTROLS,
    ):
        super().__init__(message, description, controls)
        self.buffer = TextBuffer(default or "")

    @property
    def text(self) -> str:
        return self.buffer.value

    def _handle(self, event: KeyEvent) -> PromptState:
        if self.controls.is_cancel(event):
            return PromptState.CANCEL
        if event.key is Key.ENTER:
            return PromptState.SUBMIT
        self.buffer.edit(event)
        return PromptState.ACTIVE

    def _display(self) -> str:
        if self.mask is not None:
            return self.mask * len(self.text)
        return self.text

    def render(self, state: PromptState) -> RenderPayload:
        if state is PromptState.SUBMIT:
            return RenderPayload(self.message, input=self._display())
        return RenderPayload(
            self.message,
            hint=self.description,
            input=self._display(),
            cursor=self.buffer.cursor,
            error=self.error,
        )

    def submit(self) -> str:
        return self.text
