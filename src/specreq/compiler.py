"""Prompt compiler: normalized schema nodes to widgets.

The mapping is a closed dispatch on the node's ``kind``:

========== =====================================================
kind       widget
========== =====================================================
string     :class:`Select` if ``enum``, else :class:`PasswordInput`
           for ``format: password``, :class:`DatePicker` for
           ``format: date``, :class:`StringInput` otherwise
number     :class:`Select` if ``enum``, else :class:`NumberInput`
integer    same as number
boolean    :class:`Confirm`
array      :class:`ArrayPrompt`
object     :class:`ObjectPrompt`
========== =====================================================

An enumeration always wins over a format-specific presentation, so an
enumerated password is offered as a plain selection list.
"""

from __future__ import annotations

from typing import Any, Optional

from specreq.exceptions import InvalidUsageError, SchemaError
from specreq.models import (
    ArrayNode,
    BooleanNode,
    ChoiceNode,
    IntegerNode,
    NumberNode,
    ObjectNode,
    SchemaNode,
    StringNode,
)
from specreq.values import matches_tag, to_text
from specreq.widgets import (
    DEFAULT_CONTROLS,
    ArrayPrompt,
    Confirm,
    Controls,
    DatePicker,
    NumberInput,
    ObjectPrompt,
    PasswordInput,
    Select,
    SelectOption,
    StringInput,
    Widget,
)


class PromptCompiler:
    """Build widgets for normalized nodes.

    The compiler holds the :class:`~specreq.widgets.Controls` every widget
    it builds receives, and passes itself to composite widgets so nested
    items and properties are compiled the same way.

    Args:
        controls: The skip/abort key convention.
    """

    def __init__(self, controls: Controls = DEFAULT_CONTROLS):
        self.controls = controls

    def compile(
        self,
        node: SchemaNode,
        message: str,
        description: Optional[str] = None,
        default: Any = None,
    ) -> Widget:
        """Return an uninitialized widget collecting a value for *node*.

        Args:
            node: A node without choice nodes anywhere in it.
            message: Prompt label.
            description: Hint text; defaults to the node's description.
            default: Pre-seeded value. For objects, a mapping whose
                declared, type-compatible keys are removed from the prompt.

        Raises:
            SchemaError: If *node* is an unresolved choice.
            InvalidUsageError: If an object default has the wrong type for
                a declared property.
        """
        if description is None:
            description = node.description
        controls = self.controls

        if isinstance(node, ChoiceNode):
            raise SchemaError(f"Unresolved {node.operator} at {message}: choose an alternative first")

        if isinstance(node, StringNode):
            if node.enum:
                return self._select(node.enum, message, description, default)
            text = default if isinstance(default, str) else None
            if node.format == "password":
                return PasswordInput(node, message, description, text, controls)
            if node.format == "date":
                return DatePicker(message, description, text, controls)
            return StringInput(node, message, description, text, controls)

        if isinstance(node, (NumberNode, IntegerNode)):
            if node.enum:
                return self._select(node.enum, message, description, default)
            number = default if matches_tag(node.kind, default) else None
            return NumberInput(node, message, description, number, controls)

        if isinstance(node, BooleanNode):
            return Confirm(message, description, default is True, controls)

        if isinstance(node, ArrayNode):
            return ArrayPrompt(self, node, message, description, controls)

        if isinstance(node, ObjectNode):
            defaults = self._object_defaults(node, default)
            return ObjectPrompt(self, node, message, description, controls, defaults)

        raise SchemaError(f"Cannot prompt for schema kind {node.kind!r}")

    def _select(self, values: list[Any], message: str, description: Optional[str], default: Any) -> Select:
        options = [SelectOption(to_text(value), value) for value in values]
        return Select(message, options, description, default, self.controls)

    @staticmethod
    def _object_defaults(node: ObjectNode, default: Any) -> dict[str, Any]:
        if default is None:
            return {}
        if not isinstance(default, dict):
            raise InvalidUsageError(f"Default for object must be a mapping, got {default!r}")
        for name, value in default.items():
            child = node.properties.get(name)
            if child is not None and not matches_tag(child.kind, value):
                raise InvalidUsageError(
                    f"Invalid value for '{name}': expected {child.kind}, got {value!r}"
                )
        return dict(default)
