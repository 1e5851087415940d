"""Filterable selection list."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

from rich.text import Text

from specreq.exceptions import PromptError
from specreq.widgets.base import (
    DEFAULT_CONTROLS,
    Controls,
    Key,
    KeyEvent,
    PromptState,
    RenderPayload,
    Widget,
)
from specreq.widgets.text import TextBuffer

PAGE_SIZE = 8


@dataclass(frozen=True)
class SelectOption:
    """One entry of a :class:`Select`. ``value`` is what ``submit()`` returns."""

    label: str
    value: Any
    hint: Optional[str] = None


def matches(pattern: str, label: str) -> bool:
    """Case-insensitive subsequence match (``"gpt"`` matches ``"GET /pets"``)."""
    remaining = iter(label.lower())
    return all(ch in remaining for ch in pattern.lower())


class Select(Widget):
    """Pick one option from a list, narrowing it by typing.

    Up/Down move the highlight, PageUp/PageDown move by a page, typed text
    filters the options. Enter submits the highlighted option; with no
    matches it reports an error instead.

    Raises:
        PromptError: From :meth:`initialize` when there are no options.
    """

    def __init__(
        self,
        message: str,
        options: Sequence[SelectOption],
        description: Optional[str] = None,
        default: Any = None,
        controls: Controls = DEFAULT_CONTROLS,
        page_size: int = PAGE_SIZE,
    ):
        super().__init__(message, description, controls)
        self.options = list(options)
        self.page_size = page_size
        self.filter = TextBuffer()
        self.filtered = list(range(len(self.options)))
        self.index = next(
            (i for i, option in enumerate(self.options) if default is not None and option.value == default),
            0,
        )

    def initialize(self) -> PromptState:
        if not self.options:
            raise PromptError(f"No options to choose from for {self.message}")
        return PromptState.ACTIVE

    @property
    def current(self) -> Optional[SelectOption]:
        if not self.filtered:
            return None
        return self.options[self.filtered[self.index]]

    def _handle(self, event: KeyEvent) -> PromptState:
        if self.controls.is_cancel(event):
            return PromptState.CANCEL
        if event.key is Key.ENTER:
            if self.current is None:
                self.error = "No matches found"
                return PromptState.ACTIVE
            return PromptState.SUBMIT

        last = max(len(self.filtered) - 1, 0)
        if event.key is Key.UP or event in (KeyEvent.control("p"), KeyEvent.control("k")):
            self.index = max(self.index - 1, 0)
        elif event.key is Key.DOWN or event in (KeyEvent.control("n"), KeyEvent.control("j")):
            self.index = min(self.index + 1, last)
        elif event.key is Key.PAGE_UP:
            self.index = max(self.index - self.page_size, 0)
        elif event.key is Key.PAGE_DOWN:
            self.index = min(self.index + self.page_size, last)
        elif self.filter.edit(event):
            self._run_filter()
        return PromptState.ACTIVE

    def _run_filter(self) -> None:
        pattern = self.filter.value
        self.filtered = [i for i, option in enumerate(self.options) if matches(pattern, option.label)]
        self.index = min(self.index, max(len(self.filtered) - 1, 0))

    def _page(self) -> tuple[int, list[int]]:
        start = (self.index // self.page_size) * self.page_size
        return start, self.filtered[start : start + self.page_size]

    def render(self, state: PromptState) -> RenderPayload:
        if state is PromptState.SUBMIT and self.current is not None:
            return RenderPayload(self.message, input=self.current.label)

        body = Text()
        start, page = self._page()
        if not page:
            body.append("<No matches found>", style="dim")
        for offset, idx in enumerate(page):
            option = self.options[idx]
            active = start + offset == self.index
            if offset:
                body.append("\n")
            body.append("› " if active else "  ", style="cyan")
            body.append(option.label, style="bold cyan" if active else "")
            if option.hint:
                body.append(f"  {option.hint}", style="dim")
        if len(self.filtered) > self.page_size:
            pages = (len(self.filtered) - 1) // self.page_size + 1
            body.append(f"\n  page {start // self.page_size + 1}/{pages}", style="dim")

        return RenderPayload(
            self.message,
            hint=self.description,
            input=self.filter.value,
            cursor=self.filter.cursor,
            placeholder="type to filter",
            body=body,
            error=self.error,
        )

    def submit(self) -> Any:
        return self.current.value
