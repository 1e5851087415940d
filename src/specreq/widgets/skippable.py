"""Decorator that makes any widget optional."""

from __future__ import annotations

from typing import Any

from specreq.values import ABSENT
from specreq.widgets.base import KeyEvent, PromptState, RenderPayload, Widget


class Skippable(Widget):
    """Wrap *inner* so that the skip key submits "no value".

    The skip key is intercepted before the wrapped widget sees it, at any
    point of the interaction, and :meth:`submit` then returns
    :data:`~specreq.values.ABSENT` without calling the wrapped widget's
    ``submit``. Every other event is delegated unchanged.
    """

    def __init__(self, inner: Widget):
        super().__init__(inner.message, inner.description, inner.controls)
        self.inner = inner
        self.skipped = False

    def initialize(self) -> PromptState:
        return self._forward(self.inner.initialize())

    def _handle(self, event: KeyEvent) -> PromptState:
        if self.controls.is_skip(event):
            self.skipped = True
            return PromptState.SUBMIT
        return self._forward(self.inner.handle(event))

    def _forward(self, state: PromptState) -> PromptState:
        if state is PromptState.FATAL:
            self.error = self.inner.error
        return state

    def render(self, state: PromptState) -> RenderPayload:
        payload = self.inner.render(state)
        if state is PromptState.SUBMIT:
            if self.skipped:
                return RenderPayload(payload.message, input="Skipped")
            return payload
        skip = f"{self.controls.skip_label} to skip"
        payload.hint = f"{payload.hint}, {skip}" if payload.hint else skip
        payload.error = self.error or payload.error
        return payload

    def validate(self) -> None:
        if not self.skipped:
            self.inner.validate()

    def submit(self) -> Any:
        if self.skipped:
            return ABSENT
        return self.inner.submit()
