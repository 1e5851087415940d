"""Array composite: collects items one child widget at a time."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from rich.text import Text

from specreq.exceptions import PromptError, ValidationError
from specreq.models import ArrayNode
from specreq.values import to_json
from specreq.widgets.base import (
    DEFAULT_CONTROLS,
    Controls,
    KeyEvent,
    PromptState,
    RenderPayload,
    Widget,
    inline,
)
from specreq.widgets.obj import ObjectPrompt
from specreq.widgets.validators import check_array

if TYPE_CHECKING:
    from specreq.compiler import PromptCompiler


class ArrayPrompt(Widget):
    """Collect a list by prompting for ``message[0]``, ``message[1]``, ...

    The child for the next index is compiled only after the previous item
    was accepted. Cancelling the active child finishes the array, and so
    does the skip key while a nested array or object item is still empty;
    ``minItems`` is enforced by :meth:`validate`, ``uniqueItems`` and
    ``maxItems`` when a child submits.

    Args:
        compiler: Used to compile a widget for each item.
        node: The array node.
        message: Prompt label; items are labelled ``message[idx]``.
        description: Shown as the hint.
        controls: Skip/abort key convention.
    """

    def __init__(
        self,
        compiler: PromptCompiler,
        node: ArrayNode,
        message: str,
        description: Optional[str] = None,
        controls: Controls = DEFAULT_CONTROLS,
    ):
        super().__init__(message, description, controls)
        self.compiler = compiler
        self.node = node
        self.items: list[Any] = []
        self.child: Optional[Widget] = None

    def initialize(self) -> PromptState:
        return self._next_child()

    def _next_child(self) -> PromptState:
        label = f"{self.message}[{len(self.items)}]"
        try:
            self.child = self.compiler.compile(self.node.items, label, self.node.items.description)
            state = self.child.initialize()
        except PromptError as exc:
            self.error = str(exc)
            return PromptState.FATAL
        if state is PromptState.FATAL:
            self.error = self.child.error
            return PromptState.FATAL
        return PromptState.ACTIVE

    def _handle(self, event: KeyEvent) -> PromptState:
        if self.controls.is_abort(event):
            return PromptState.CANCEL
        if self.controls.is_skip(event) and self._child_is_empty_composite():
            return PromptState.SUBMIT

        state = self.child.handle(event)
        if state is PromptState.CANCEL:
            return PromptState.SUBMIT
        if state is PromptState.FATAL:
            self.error = self.child.error
            return PromptState.FATAL
        if state is PromptState.SUBMIT:
            return self._accept()
        return state

    def _child_is_empty_composite(self) -> bool:
        if isinstance(self.child, ArrayPrompt):
            return not self.child.items
        if isinstance(self.child, ObjectPrompt):
            return not self.child.values
        return False

    def _accept(self) -> PromptState:
        try:
            self.child.validate()
        except ValidationError as exc:
            self.child.error = exc.message
            return PromptState.ACTIVE

        value = self.child.submit()
        if self.node.unique_items and value in self.items:
            self.error = "Value already exists"
            return self._next_child()
        if self.node.max_items is not None and len(self.items) >= self.node.max_items:
            self.error = "Array is full"
            return self._next_child()

        self.items.append(value)
        return self._next_child()

    def validate(self) -> None:
        check_array(self.items, self.node)

    def render(self, state: PromptState) -> RenderPayload:
        collected = Text("\n".join(f"{to_json(item)}," for item in self.items))
        if state is PromptState.SUBMIT:
            return RenderPayload(self.message, body=collected)

        body = Text()
        if self.items:
            body.append_text(collected)
            body.append("\n")
        if self.child is not None:
            body.append_text(inline(self.child.render(state), self.child.message))
        return RenderPayload(
            self.message,
            hint=self.description or f"{self.controls.skip_label} to finish",
            body=body,
            error=self.error,
        )

    def submit(self) -> list[Any]:
        return list(self.items)
