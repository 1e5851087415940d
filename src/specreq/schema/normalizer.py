"""Turn OpenAPI schema objects into normalized, promptable type trees.

Normalization runs in two phases:

1. :func:`normalize` is a pure, depth-first walk of a schema. It follows
   ``$ref`` pointers through :mod:`specreq.parser.resolver`, maps every
   typed schema onto one of the six node kinds, merges ``allOf`` object
   alternatives (distributing any union among them), and records
   ``oneOf``/``anyOf`` as :class:`~specreq.models.ChoiceNode` values listing
   every normalized alternative.
2. :func:`resolve_choices` runs inside the interactive session. It asks a
   chooser callback which alternative to use for every choice node and
   substitutes the pick, so the prompt compiler only ever sees
   string/number/integer/boolean/array/object nodes.

Self-referencing schemas cannot be normalized eagerly; they are detected and
reported as :class:`~specreq.exceptions.CyclicReferenceError`.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from specreq.exceptions import CyclicReferenceError, UnsupportedSchemaError
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
from specreq.parser.resolver import ComponentKind, is_reference, resolve_pointer

Chooser = Callable[[ChoiceNode, str], int]
"""Callback ``(choice, label) -> index`` picking one alternative of a choice node."""

_PRIMITIVE_TYPES = ("string", "number", "integer", "boolean", "array", "object")


def normalize(
    schema: Any,
    document: dict[str, Any],
    is_required: bool = True,
) -> tuple[SchemaNode, Optional[str]]:
    """Normalize a schema (or a reference to one) into a type-tree node.

    Args:
        schema: A Schema Object or a Reference Object pointing at one.
        document: The root OpenAPI document, used to resolve references.
        is_required: Required-ness of the value this schema describes.
            Object properties ignore it and use their parent's ``required``
            list instead; array items and composition alternatives inherit it.

    Returns:
        ``(node, description)`` where ``description`` is the schema's own
        ``description`` (``None`` for composed schemas without one).

    Raises:
        ReferenceError_: If a ``$ref`` does not resolve.
        UnsupportedExternalReference: If a ``$ref`` leaves the document.
        CyclicReferenceError: If the schema references itself.
        UnsupportedSchemaError: For ``not``, schemas without type
            information, and arrays without ``items``.

    Example::

        node, _ = normalize({"type": "array", "items": {"type": "integer"}}, doc)
        assert node.kind == "array" and node.items.kind == "integer"
    """
    node = _normalize(schema, document, is_required, ())
    return node, node.description


def _normalize(
    schema: Any,
    document: dict[str, Any],
    is_required: bool,
    stack: tuple[str, ...],
) -> SchemaNode:
    schema, stack = _follow(schema, document, stack)
    if not isinstance(schema, dict):
        raise UnsupportedSchemaError(f"Schema must be an object, got {schema!r}")

    common: dict[str, Any] = {
        "required": is_required,
        "title": schema.get("title"),
        "description": schema.get("description"),
    }

    for operator in ("oneOf", "anyOf"):
        if operator in schema:
            alternatives = [
                _normalize(alt, document, is_required, stack)
                for alt in schema[operator] or []
            ]
            if not alternatives:
                raise UnsupportedSchemaError(f"'{operator}' without alternatives")
            return ChoiceNode(operator=operator, alternatives=alternatives, **common)

    if "allOf" in schema:
        return _merge_all_of(schema, document, is_required, stack, common)

    if "not" in schema:
        raise UnsupportedSchemaError("'not' schemas are not supported")

    kind = _schema_type(schema)
    if kind == "string":
        return StringNode(
            format=schema.get("format"),
            pattern=schema.get("pattern"),
            min_length=schema.get("minLength"),
            max_length=schema.get("maxLength"),
            enum=[str(v) for v in schema.get("enum") or [] if v is not None],
            **common,
        )
    if kind in ("number", "integer"):
        return _numeric(schema, kind, common)
    if kind == "boolean":
        return BooleanNode(**common)
    if kind == "array":
        if "items" not in schema:
            raise UnsupportedSchemaError("Array schema declares no 'items'")
        return ArrayNode(
            items=_normalize(schema["items"], document, is_required, stack),
            min_items=schema.get("minItems"),
            max_items=schema.get("maxItems"),
            unique_items=bool(schema.get("uniqueItems", False)),
            **common,
        )
    if kind == "object":
        return ObjectNode(properties=_properties(schema, document, stack), **common)

    raise UnsupportedSchemaError(
        "Schemas without a type (free-form 'any' values) are not supported"
    )


def _follow(
    schema: Any,
    document: dict[str, Any],
    stack: tuple[str, ...],
) -> tuple[Any, tuple[str, ...]]:
    """Resolve *schema* to a direct item, pushing every pointer onto *stack*."""
    while is_reference(schema):
        pointer = schema["$ref"]
        if pointer in stack:
            raise CyclicReferenceError(list(stack) + [pointer])
        stack = stack + (pointer,)
        schema = resolve_pointer(pointer, document, ComponentKind.SCHEMA)
    return schema, stack


def _schema_type(schema: dict[str, Any]) -> Optional[str]:
    """Return the schema's type, handling 3.1 type lists and implicit types.

    ``["string", "null"]`` yields ``"string"``; a schema without ``type``
    is an object when it declares ``properties`` and an array when it
    declares ``items``.
    """
    value = schema.get("type")
    if isinstance(value, list):
        value = next((t for t in value if t != "null"), None)
    if value in _PRIMITIVE_TYPES:
        return value
    if value is None:
        if "properties" in schema:
            return "object"
        if "items" in schema:
            return "array"
    return None


def _numeric(schema: dict[str, Any], kind: str, common: dict[str, Any]) -> SchemaNode:
    minimum = schema.get("minimum")
    maximum = schema.get("maximum")
    exclusive_minimum = schema.get("exclusiveMinimum", False)
    exclusive_maximum = schema.get("exclusiveMaximum", False)

    # 3.1 spells exclusive bounds as numbers rather than flags
    if not isinstance(exclusive_minimum, bool):
        minimum, exclusive_minimum = exclusive_minimum, True
    if not isinstance(exclusive_maximum, bool):
        maximum, exclusive_maximum = exclusive_maximum, True

    enum = [v for v in schema.get("enum") or [] if isinstance(v, (int, float)) and not isinstance(v, bool)]
    node_type = IntegerNode if kind == "integer" else NumberNode
    return node_type(
        minimum=minimum,
        maximum=maximum,
        exclusive_minimum=exclusive_minimum,
        exclusive_maximum=exclusive_maximum,
        multiple_of=schema.get("multipleOf"),
        enum=enum,
        **common,
    )


def _properties(
    schema: dict[str, Any],
    document: dict[str, Any],
    stack: tuple[str, ...],
) -> dict[str, SchemaNode]:
    required = set(schema.get("required") or [])
    return {
        name: _normalize(prop, document, name in required, stack)
        for name, prop in (schema.get("properties") or {}).items()
    }


def _merge_all_of(
    schema: dict[str, Any],
    document: dict[str, Any],
    is_required: bool,
    stack: tuple[str, ...],
    common: dict[str, Any],
) -> SchemaNode:
    """Merge the object alternatives of an ``allOf`` into one object node.

    Properties declared next to ``allOf`` count as one more (last)
    alternative. Later alternatives overwrite earlier ones on name
    collisions; non-object alternatives are dropped.

    A ``oneOf``/``anyOf`` alternative is distributed over the merge:
    ``allOf[Base, oneOf[A, B]]`` becomes a choice between
    ``merge(Base, A)`` and ``merge(Base, B)``.
    """
    parts = [_normalize(alt, document, is_required, stack) for alt in schema["allOf"] or []]
    if schema.get("properties"):
        parts.append(ObjectNode(properties=_properties(schema, document, stack)))
    return _merge_parts(parts, common)


def _merge_parts(parts: list[SchemaNode], common: dict[str, Any]) -> SchemaNode:
    for index, part in enumerate(parts):
        if isinstance(part, ChoiceNode):
            alternatives = [
                _merge_parts(
                    parts[:index] + [alt] + parts[index + 1 :],
                    {**common, "title": alt.title, "description": alt.description},
                )
                for alt in part.alternatives
            ]
            return ChoiceNode(operator=part.operator, alternatives=alternatives, **common)

    merged: dict[str, SchemaNode] = {}
    for part in parts:
        if isinstance(part, ObjectNode):
            merged.update(part.properties)
    return ObjectNode(properties=merged, **common)


# --- Phase two ---


def resolve_choices(node: SchemaNode, choose: Chooser, label: str = "") -> SchemaNode:
    """Replace every choice node in *node* with the alternative *choose* picks.

    Args:
        node: A first-phase node, possibly containing choice nodes anywhere.
        choose: Called with each choice node and a dotted label locating it
            (``"Request Body.pet"``); returns the index of the alternative.
        label: Label of *node* itself.

    Returns:
        A tree free of :class:`~specreq.models.ChoiceNode`. Unchanged
        subtrees are returned as-is.
    """
    if isinstance(node, ChoiceNode):
        index = choose(node, label)
        picked = resolve_choices(node.alternatives[index], choose, label)
        return picked.model_copy(
            update={
                "required": node.required,
                "description": picked.description or node.description,
            }
        )
    if isinstance(node, ArrayNode):
        items = resolve_choices(node.items, choose, f"{label}[]")
        return node if items is node.items else node.model_copy(update={"items": items})
    if isinstance(node, ObjectNode):
        properties = {
            name: resolve_choices(child, choose, f"{label}.{name}" if label else name)
            for name, child in node.properties.items()
        }
        changed = any(properties[name] is not node.properties[name] for name in properties)
        return node.model_copy(update={"properties": properties}) if changed else node
    return node


def describe(node: SchemaNode) -> str:
    """Short human-readable label for a node, used for choice options."""
    if node.title:
        return node.title
    if isinstance(node, ObjectNode):
        fields = ", ".join(
            name if child.required else f"{name}?" for name, child in node.properties.items()
        )
        return f"Object {{ {fields} }}" if fields else "Object"
    if isinstance(node, ArrayNode):
        return f"Array<{describe(node.items)}>"
    if isinstance(node, ChoiceNode):
        return " | ".join(describe(alt) for alt in node.alternatives)
    if isinstance(node, StringNode) and node.format:
        return f"String ({node.format})"
    return node.kind.capitalize()
