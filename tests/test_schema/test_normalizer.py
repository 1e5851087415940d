"""Tests for specreq.schema.normalizer."""

from __future__ import annotations

from typing import Any

import pytest

from specreq.exceptions import (
    CyclicReferenceError,
    ReferenceError_,
    UnsupportedExternalReference,
    UnsupportedSchemaError,
)
from specreq.models import (
    ArrayNode,
    BooleanNode,
    ChoiceNode,
    IntegerNode,
    NumberNode,
    ObjectNode,
    StringNode,
)
from specreq.schema import describe, normalize, resolve_choices


def _doc(**schemas: Any) -> dict[str, Any]:
    return {"openapi": "3.1.0", "components": {"schemas": schemas}}


def _props(*names: str) -> dict[str, Any]:
    return {"properties": {name: {"type": "string"} for name in names}}


# ---------------------------------------------------------------------------
# Phase one: normalize
# ---------------------------------------------------------------------------


class TestPrimitives:
    def test_string_facets(self) -> None:
        node, description = normalize(
            {
                "type": "string",
                "format": "email",
                "pattern": "^a",
                "minLength": 2,
                "maxLength": 9,
                "description": "An address",
            },
            _doc(),
        )
        assert isinstance(node, StringNode)
        assert (node.format, node.pattern, node.min_length, node.max_length) == (
            "email",
            "^a",
            2,
            9,
        )
        assert description == "An address"
        assert node.required is True

    def test_string_enum_drops_null(self) -> None:
        node, _ = normalize({"type": "string", "enum": ["a", None, "b"]}, _doc())
        assert node.enum == ["a", "b"]

    def test_integer_and_number(self) -> None:
        integer, _ = normalize({"type": "integer", "minimum": 1, "maximum": 5}, _doc())
        number, _ = normalize({"type": "number", "multipleOf": 0.5}, _doc())
        assert isinstance(integer, IntegerNode)
        assert (integer.minimum, integer.maximum) == (1, 5)
        assert isinstance(number, NumberNode)
        assert number.multiple_of == 0.5

    def test_numeric_enum_ignores_booleans(self) -> None:
        node, _ = normalize({"type": "integer", "enum": [1, True, 2]}, _doc())
        assert node.enum == [1, 2]

    def test_boolean(self) -> None:
        node, _ = normalize({"type": "boolean"}, _doc(), is_required=False)
        assert isinstance(node, BooleanNode)
        assert node.required is False

    def test_exclusive_flags_30(self) -> None:
        node, _ = normalize(
            {"type": "number", "minimum": 0, "exclusiveMinimum": True, "maximum": 10},
            _doc(),
        )
        assert node.exclusive_minimum is True
        assert node.exclusive_maximum is False

    def test_exclusive_bounds_31(self) -> None:
        node, _ = normalize(
            {"type": "integer", "exclusiveMinimum": 0, "exclusiveMaximum": 100}, _doc()
        )
        assert (node.minimum, node.exclusive_minimum) == (0, True)
        assert (node.maximum, node.exclusive_maximum) == (100, True)

    def test_nullable_type_list(self) -> None:
        node, _ = normalize({"type": ["null", "string"]}, _doc())
        assert isinstance(node, StringNode)


class TestContainers:
    def test_array_items_inherit_required(self) -> None:
        node, _ = normalize(
            {"type": "array", "items": {"type": "integer"}, "minItems": 1, "uniqueItems": True},
            _doc(),
            is_required=False,
        )
        assert isinstance(node, ArrayNode)
        assert isinstance(node.items, IntegerNode)
        assert node.items.required is False
        assert node.min_items == 1
        assert node.unique_items is True

    def test_array_without_items(self) -> None:
        with pytest.raises(UnsupportedSchemaError, match="no 'items'"):
            normalize({"type": "array"}, _doc())

    def test_object_property_required_from_parent(self) -> None:
        node, _ = normalize(
            {
                "type": "object",
                "required": ["name"],
                "properties": {"name": {"type": "string"}, "age": {"type": "integer"}},
            },
            _doc(),
            is_required=False,
        )
        assert isinstance(node, ObjectNode)
        assert list(node.properties) == ["name", "age"]
        assert node.properties["name"].required is True
        assert node.properties["age"].required is False
        assert node.required is False

    def test_implicit_object_and_array(self) -> None:
        obj, _ = normalize({"properties": {"a": {"type": "string"}}}, _doc())
        arr, _ = normalize({"items": {"type": "string"}}, _doc())
        assert isinstance(obj, ObjectNode)
        assert isinstance(arr, ArrayNode)

    def test_schema_without_type(self) -> None:
        with pytest.raises(UnsupportedSchemaError, match="without a type"):
            normalize({"description": "anything"}, _doc())


class TestReferences:
    def test_follows_reference(self) -> None:
        doc = _doc(Name={"type": "string", "description": "Pet name"})
        node, description = normalize({"$ref": "#/components/schemas/Name"}, doc)
        assert isinstance(node, StringNode)
        assert description == "Pet name"

    def test_same_schema_twice_is_not_a_cycle(self) -> None:
        doc = _doc(
            Address={"type": "object", "properties": {"city": {"type": "string"}}},
            Order={
                "type": "object",
                "properties": {
                    "billing": {"$ref": "#/components/schemas/Address"},
                    "shipping": {"$ref": "#/components/schemas/Address"},
                },
            },
        )
        node, _ = normalize({"$ref": "#/components/schemas/Order"}, doc)
        assert set(node.properties) == {"billing", "shipping"}

    def test_self_reference_is_detected(self) -> None:
        doc = _doc(
            Tree={
                "type": "object",
                "properties": {
                    "children": {"type": "array", "items": {"$ref": "#/components/schemas/Tree"}}
                },
            }
        )
        with pytest.raises(CyclicReferenceError) as exc_info:
            normalize({"$ref": "#/components/schemas/Tree"}, doc)
        assert exc_info.value.chain == ["#/components/schemas/Tree", "#/components/schemas/Tree"]

    def test_dangling_reference(self) -> None:
        with pytest.raises(ReferenceError_, match="#/components/schemas/Nope"):
            normalize({"$ref": "#/components/schemas/Nope"}, _doc())

    def test_external_reference(self) -> None:
        with pytest.raises(UnsupportedExternalReference):
            normalize({"$ref": "common.yaml#/Pet"}, _doc())


class TestComposition:
    def test_one_of_becomes_choice(self) -> None:
        node, _ = normalize(
            {"oneOf": [{"type": "string"}, {"type": "integer"}], "description": "Id"},
            _doc(),
        )
        assert isinstance(node, ChoiceNode)
        assert node.operator == "oneOf"
        assert [alt.kind for alt in node.alternatives] == ["string", "integer"]
        assert node.description == "Id"

    def test_any_of_becomes_choice(self) -> None:
        node, _ = normalize({"anyOf": [{"type": "boolean"}]}, _doc())
        assert isinstance(node, ChoiceNode)
        assert node.operator == "anyOf"

    def test_empty_one_of(self) -> None:
        with pytest.raises(UnsupportedSchemaError, match="without alternatives"):
            normalize({"oneOf": []}, _doc())

    def test_all_of_merges_objects_later_wins(self) -> None:
        doc = _doc(
            Base={
                "type": "object",
                "required": ["id"],
                "properties": {"id": {"type": "integer"}, "name": {"type": "string"}},
            }
        )
        node, _ = normalize(
            {
                "allOf": [
                    {"$ref": "#/components/schemas/Base"},
                    {"type": "object", "properties": {"name": {"type": "integer"}}},
                    {"type": "string"},
                ],
                "properties": {"extra": {"type": "boolean"}},
            },
            doc,
        )
        assert isinstance(node, ObjectNode)
        assert list(node.properties) == ["id", "name", "extra"]
        assert node.properties["id"].required is True
        assert isinstance(node.properties["name"], IntegerNode)

    def test_all_of_distributes_over_nested_one_of(self) -> None:
        doc = _doc(
            Base={"type": "object", "required": ["id"], "properties": {"id": {"type": "integer"}}},
            Cat={"title": "Cat", "type": "object", "properties": {"meow": {"type": "boolean"}}},
            Dog={"title": "Dog", "type": "object", "properties": {"bark": {"type": "string"}}},
        )
        node, _ = normalize(
            {
                "description": "A pet",
                "allOf": [
                    {"$ref": "#/components/schemas/Base"},
                    {
                        "oneOf": [
                            {"$ref": "#/components/schemas/Cat"},
                            {"$ref": "#/components/schemas/Dog"},
                        ]
                    },
                ],
            },
            doc,
            is_required=False,
        )
        assert isinstance(node, ChoiceNode)
        assert node.operator == "oneOf"
        assert node.description == "A pet"
        assert [describe(alt) for alt in node.alternatives] == ["Cat", "Dog"]
        assert [list(alt.properties) for alt in node.alternatives] == [["id", "meow"], ["id", "bark"]]
        assert node.alternatives[1].properties["id"].required is True

        picked = resolve_choices(node, lambda choice, label: 1)
        assert isinstance(picked, ObjectNode)
        assert list(picked.properties) == ["id", "bark"]
        assert picked.required is False

    def test_all_of_with_two_choices_yields_nested_choices(self) -> None:
        node, _ = normalize(
            {
                "allOf": [
                    {"oneOf": [_props("a"), _props("b")]},
                    {"anyOf": [_props("c"), _props("d")]},
                ]
            },
            _doc(),
        )
        picked = resolve_choices(node, lambda choice, label: 1)
        assert list(picked.properties) == ["b", "d"]

    def test_not_is_unsupported(self) -> None:
        with pytest.raises(UnsupportedSchemaError, match="'not'"):
            normalize({"not": {"type": "string"}}, _doc())


class TestDeterminism:
    def test_same_input_normalizes_identically(self) -> None:
        doc = _doc(
            Base={"type": "object", "required": ["id"], "properties": {"id": {"type": "integer"}}},
            Tag={"type": "string", "enum": ["a", "b"], "description": "Tag"},
        )
        tag = {"$ref": "#/components/schemas/Tag"}
        schema = {
            "allOf": [
                {"$ref": "#/components/schemas/Base"},
                {"oneOf": [_props("name"), {"properties": {"tags": {"items": tag}}}]},
            ],
            "properties": {"size": {"type": "number", "exclusiveMinimum": 0}},
        }
        first, first_description = normalize(schema, doc, is_required=False)
        second, second_description = normalize(schema, doc, is_required=False)
        assert first == second
        assert first is not second
        assert first_description == second_description
        assert first.model_dump() == second.model_dump()


# ---------------------------------------------------------------------------
# Phase two: resolve_choices
# ---------------------------------------------------------------------------


class TestResolveChoices:
    def test_tree_without_choices_is_unchanged(self) -> None:
        node, _ = normalize(
            {"type": "object", "properties": {"a": {"type": "string"}}}, _doc()
        )
        assert resolve_choices(node, lambda choice, label: 0) is node

    def test_picks_alternative_and_keeps_required(self) -> None:
        node, _ = normalize(
            {"oneOf": [{"type": "string"}, {"type": "integer"}], "description": "Either"},
            _doc(),
            is_required=False,
        )
        picked = resolve_choices(node, lambda choice, label: 1, "id")
        assert isinstance(picked, IntegerNode)
        assert picked.required is False
        assert picked.description == "Either"

    def test_labels_locate_nested_choices(self) -> None:
        node, _ = normalize(
            {
                "type": "object",
                "properties": {
                    "pet": {"oneOf": [{"type": "string"}, {"type": "boolean"}]},
                    "ids": {
                        "type": "array",
                        "items": {"anyOf": [{"type": "integer"}, {"type": "string"}]},
                    },
                },
            },
            _doc(),
        )
        seen: list[str] = []

        def choose(choice: ChoiceNode, label: str) -> int:
            seen.append(label)
            return 0

        resolved = resolve_choices(node, choose, "Request Body")
        assert seen == ["Request Body.pet", "Request Body.ids[]"]
        assert isinstance(resolved.properties["pet"], StringNode)
        assert isinstance(resolved.properties["ids"].items, IntegerNode)

    def test_nested_choice_inside_alternative(self) -> None:
        node, _ = normalize(
            {"oneOf": [{"oneOf": [{"type": "string"}, {"type": "number"}]}, {"type": "boolean"}]},
            _doc(),
        )
        picks = iter([0, 1])
        resolved = resolve_choices(node, lambda choice, label: next(picks))
        assert isinstance(resolved, NumberNode)


class TestDescribe:
    @pytest.mark.parametrize(
        ("schema", "expected"),
        [
            ({"type": "string"}, "String"),
            ({"type": "string", "format": "date"}, "String (date)"),
            ({"type": "integer", "title": "Widget id"}, "Widget id"),
            ({"type": "array", "items": {"type": "number"}}, "Array<Number>"),
            (
                {
                    "type": "object",
                    "required": ["a"],
                    "properties": {"a": {"type": "string"}, "b": {"type": "string"}},
                },
                "Object { a, b? }",
            ),
            ({"type": "object"}, "Object"),
            ({"oneOf": [{"type": "string"}, {"type": "boolean"}]}, "String | Boolean"),
        ],
    )
    def test_describe(self, schema: dict[str, Any], expected: str) -> None:
        node, _ = normalize(schema, _doc())
        assert describe(node) == expected
