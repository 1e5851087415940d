"""Calendar picker for ``format: date`` strings."""

from __future__ import annotations

import calendar
import datetime
from typing import Callable, Optional

from rich.text import Text

from specreq.widgets.base import (
    DEFAULT_CONTROLS,
    Controls,
    Key,
    KeyEvent,
    PromptState,
    RenderPayload,
    Widget,
)


def add_months(day: datetime.date, months: int) -> datetime.date:
    """Shift *day* by whole months, clamping to the target month's length."""
    index = day.year * 12 + day.month - 1 + months
    year, month = divmod(index, 12)
    last = calendar.monthrange(year, month + 1)[1]
    return day.replace(year=year, month=month + 1, day=min(day.day, last))


class DatePicker(Widget):
    """Pick a date on a month calendar; submits ``YYYY-MM-DD``.

    Left/Right move one day, Up/Down one week, ``[``/``]`` one month.
    ``t`` jumps back to today.

    Args:
        message: Prompt label.
        description: Shown as the hint.
        default: An ISO date to start from; ignored if it does not parse.
        controls: Skip/abort key convention.
        today: Clock used for the starting date, for tests.
    """

    def __init__(
        self,
        message: str,
        description: Optional[str] = None,
        default: Optional[str] = None,
        controls: Controls = DEFAULT_CONTROLS,
        today: Callable[[], datetime.date] = datetime.date.today,
    ):
        super().__init__(message, description, controls)
        self._today = today
        self.value = today()
        if default:
            try:
                self.value = datetime.date.fromisoformat(default)
            except ValueError:
                pass

    def _handle(self, event: KeyEvent) -> PromptState:
        if self.controls.is_cancel(event):
            return PromptState.CANCEL
        if event.key is Key.ENTER:
            return PromptState.SUBMIT

        step = {
            Key.LEFT: datetime.timedelta(days=-1),
            Key.RIGHT: datetime.timedelta(days=1),
            Key.UP: datetime.timedelta(weeks=-1),
            Key.DOWN: datetime.timedelta(weeks=1),
        }.get(event.key)
        if step is not None:
            self.value += step
        elif event == KeyEvent.of("["):
            self.value = add_months(self.value, -1)
        elif event == KeyEvent.of("]"):
            self.value = add_months(self.value, 1)
        elif event == KeyEvent.of("t"):
            self.value = self._today()
        return PromptState.ACTIVE

    def _calendar(self) -> Text:
        body = Text(f"{self.value:%B %Y}".center(20) + "\n", style="bold")
        body.append("Mo Tu We Th Fr Sa Su", style="dim")
        for week in calendar.monthcalendar(self.value.year, self.value.month):
            body.append("\n")
            for i, day in enumerate(week):
                cell = f"{day:2d}" if day else "  "
                body.append(cell, style="reverse cyan" if day == self.value.day else "")
                if i < 6:
                    body.append(" ")
        return body

    def render(self, state: PromptState) -> RenderPayload:
        if state is PromptState.SUBMIT:
            return RenderPayload(self.message, input=self.submit())
        hint = "←/→ day, ↑/↓ week, [/] month"
        if self.description:
            hint = f"{self.description}, {hint}"
        return RenderPayload(
            self.message,
            hint=hint,
            input=self.submit(),
            body=self._calendar(),
            error=self.error,
        )

    def submit(self) -> str:
        return self.value.isoformat()
