"""Object composite: prompts for each property in declaration order."""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, Any, Optional

from rich.text import Text

from specreq.exceptions import PromptError, ValidationError
from specreq.models import ObjectNode
from specreq.values import ABSENT, is_absent, to_json
from specreq.widgets.base import (
    DEFAULT_CONTROLS,
    Controls,
    KeyEvent,
    PromptState,
    RenderPayload,
    Widget,
    inline,
)

if TYPE_CHECKING:
    from specreq.compiler import PromptCompiler


class ObjectPrompt(Widget):
    """Collect an object, one property widget at a time.

    Properties already present in *defaults* are not asked for. Cancelling
    a required property keeps it active with an error naming it;
    cancelling an optional one records it as absent, so it is left out of
    the submitted object rather than sent as ``null``.

    Args:
        compiler: Used to compile a widget per property.
        node: The object node.
        message: Prompt label.
        description: Shown as the hint.
        controls: Skip/abort key convention.
        defaults: Pre-populated values. Keys that are not declared
            properties are carried into the result unchanged.
    """

    def __init__(
        self,
        compiler: PromptCompiler,
        node: ObjectNode,
        message: str,
        description: Optional[str] = None,
        controls: Controls = DEFAULT_CONTROLS,
        defaults: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, description, controls)
        self.compiler = compiler
        self.node = node
        self.defaults = dict(defaults or {})
        self.values: dict[str, Any] = {}
        self.queue: deque[tuple[str, Widget]] = deque()

    @property
    def current(self) -> Optional[tuple[str, Widget]]:
        return self.queue[0] if self.queue else None

    def initialize(self) -> PromptState:
        for name, child in self.node.properties.items():
            if name in self.defaults:
                continue
            self.queue.append((name, self.compiler.compile(child, name, child.description)))
        return self._activate()

    def _activate(self) -> PromptState:
        """Initialize the front of the queue, accepting children that finish at once."""
        while self.queue:
            name, child = self.queue[0]
            try:
                state = child.initialize()
            except PromptError as exc:
                self.error = str(exc)
                return PromptState.FATAL
            if state is PromptState.FATAL:
                self.error = child.error
                return PromptState.FATAL
            if state is not PromptState.SUBMIT:
                return PromptState.ACTIVE
            self.values[name] = child.submit()
            self.queue.popleft()
        return PromptState.SUBMIT

    def _handle(self, event: KeyEvent) -> PromptState:
        if self.controls.is_abort(event):
            return PromptState.CANCEL
        if not self.queue:
            return PromptState.SUBMIT

        name, child = self.queue[0]
        state = child.handle(event)
        if state is PromptState.SUBMIT:
            try:
                child.validate()
            except ValidationError as exc:
                child.error = exc.message
                return PromptState.ACTIVE
            self.values[name] = child.submit()
        elif state is PromptState.CANCEL:
            if self.node.properties[name].required:
                self.error = f"{name} is required field"
                return PromptState.ACTIVE
            self.values[name] = ABSENT
        elif state is PromptState.FATAL:
            self.error = child.error
            return PromptState.FATAL
        else:
            return state

        self.queue.popleft()
        return self._activate()

    def _label(self, name: str) -> str:
        return name if self.node.properties[name].required else f"{name}?"

    def render(self, state: PromptState) -> RenderPayload:
        if state is PromptState.SUBMIT:
            lines = [f"{name}: {to_json(value)}" for name, value in self.submit().items()]
            return RenderPayload(self.message, body=Text("\n".join(lines)))

        body = Text()
        for name, value in self.values.items():
            shown = Text("Skipped", style="dim") if is_absent(value) else Text(to_json(value))
            body.append(f"{self._label(name)}: ")
            body.append_text(shown)
            body.append("\n")
        if self.current is not None:
            name, child = self.current
            body.append_text(inline(child.render(state), self._label(name)))
        return RenderPayload(self.message, hint=self.description, body=body, error=self.error)

    def submit(self) -> dict[str, Any]:
        """Return the object in declaration order, then undeclared defaults."""
        result: dict[str, Any] = {}
        for name in self.node.properties:
            value = self.values.get(name, self.defaults.get(name, ABSENT))
            if not is_absent(value):
                result[name] = value
        for name, value in self.defaults.items():
            if name not in self.node.properties:
                result[name] = value
        return result
