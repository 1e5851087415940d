"""Session driver: runs one widget to a terminal state."""

from __future__ import annotations

from typing import Any

from specreq.exceptions import PromptCancelled, PromptError, ValidationError
from specreq.output import debug
from specreq.terminal import Terminal
from specreq.widgets.base import PromptState, Widget


class SessionDriver:
    """Drive widgets against a :class:`~specreq.terminal.Terminal`.

    Exactly one widget is active at a time. The terminal is acquired for
    the duration of :meth:`run` and released on every exit path.

    Args:
        terminal: Where key events come from and frames go to.
    """

    def __init__(self, terminal: Terminal):
        self.terminal = terminal

    def step(self, title: str) -> None:
        """Announce a group of prompts (``Path parameters``, ...)."""
        self.terminal.heading(title)

    def run(self, widget: Widget) -> Any:
        """Run *widget* until it submits a valid value.

        A failed validation keeps the widget active and shows the message
        on the next frame.

        Returns:
            The submitted value (may be :data:`~specreq.values.ABSENT` for a
            skipped optional widget).

        Raises:
            PromptCancelled: The widget was cancelled.
            PromptError: The widget failed to initialize or went Fatal, or
                the terminal failed.
        """
        with self.terminal.session():
            state = widget.initialize()
            while True:
                if state is PromptState.FATAL:
                    raise PromptError(widget.error or f"Prompt failed: {widget.message}")
                if state is PromptState.CANCEL:
                    self.terminal.draw(widget.render(state), state)
                    raise PromptCancelled(widget.message)
                if state is PromptState.SUBMIT:
                    try:
                        widget.validate()
                    except ValidationError as exc:
                        debug(f"Validation failed for {widget.message}: {exc.message}")
                        widget.error = exc.message
                        state = PromptState.ACTIVE
                    else:
                        value = widget.submit()
                        self.terminal.draw(widget.render(state), state)
                        return value

                self.terminal.draw(widget.render(state), state)
                state = widget.handle(self.terminal.read_key())
