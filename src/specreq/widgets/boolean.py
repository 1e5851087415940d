"""Yes/no confirmation."""

from __future__ import annotations

from typing import Optional

from specreq.widgets.base import (
    DEFAULT_CONTROLS,
    Controls,
    Key,
    KeyEvent,
    PromptState,
    RenderPayload,
    Widget,
)


class Confirm(Widget):
    """Binary choice. ``y``/``n`` answer immediately; arrows toggle, Enter submits."""

    def __init__(
        self,
        message: str,
        description: Optional[str] = None,
        default: bool = False,
        controls: Controls = DEFAULT_CONTROLS,
    ):
        super().__init__(message, description, controls)
        self.value = bool(default)

    def _handle(self, event: KeyEvent) -> PromptState:
        if self.controls.is_cancel(event):
            return PromptState.CANCEL
        if event.is_char() and event.char.lower() in ("y", "n"):
            self.value = event.char.lower() == "y"
            return PromptState.SUBMIT
        if event.key in (Key.LEFT, Key.RIGHT, Key.UP, Key.DOWN, Key.TAB):
            self.value = not self.value
        elif event.key is Key.ENTER:
            return PromptState.SUBMIT
        return PromptState.ACTIVE

    def render(self, state: PromptState) -> RenderPayload:
        answer = "Yes" if self.value else "No"
        if state is PromptState.SUBMIT:
            return RenderPayload(self.message, input=answer)
        hint = f"{self.description}, y/n" if self.description else "y/n"
        return RenderPayload(self.message, hint=hint, input=answer, error=self.error)

    def submit(self) -> bool:
        return self.value
