"""Resolve ``$ref`` JSON Reference pointers on demand.

OpenAPI documents use ``$ref`` pointers (e.g.,
``{"$ref": "#/components/schemas/Pet"}``) to avoid repetition. Unlike a
whole-document inliner, this resolver works lazily: callers hand it one
reference-or-item value at the moment they visit it, and get back the item
the reference chain ends at. The document itself is never copied or
modified.

Only **internal** references (those starting with ``#/``) are supported.
Anything else raises :class:`~specreq.exceptions.UnsupportedExternalReference`;
a pointer that does not land on a value raises
:class:`~specreq.exceptions.ReferenceError_` naming the pointer.

Callers may state which kind of component they expect
(:class:`ComponentKind`). A pointer into ``#/components/<table>/`` must then
target the matching table, so that a parameter reference cannot silently
resolve to a schema.
"""

from __future__ import annotations

import enum
from typing import Any, Iterable, Iterator, Optional

from specreq.exceptions import (
    CyclicReferenceError,
    ReferenceError_,
    UnsupportedExternalReference,
)


class ComponentKind(str, enum.Enum):
    """Entity kinds a reference can point at, keyed by their components table."""

    PARAMETER = "parameters"
    REQUEST_BODY = "requestBodies"
    RESPONSE = "responses"
    SCHEMA = "schemas"
    PATH_ITEM = "pathItems"


def is_reference(obj: Any) -> bool:
    """Return ``True`` if *obj* is a Reference Object (a dict with ``$ref``)."""
    return isinstance(obj, dict) and "$ref" in obj


def resolve(
    obj: Any,
    document: dict[str, Any],
    kind: Optional[ComponentKind] = None,
) -> Any:
    """Follow *obj* through any chain of references to the item it names.

    A direct item is returned unchanged. References are resolved one
    indirection at a time, so chains such as reference -> reference -> item
    of any depth are followed. A chain that revisits a pointer raises
    :class:`~specreq.exceptions.CyclicReferenceError` instead of looping.

    Args:
        obj: A Reference Object or an inline item.
        document: The root OpenAPI document.
        kind: Expected component kind, checked for ``#/components/`` pointers.

    Returns:
        The referenced item (the same object that lives in *document*).

    Raises:
        UnsupportedExternalReference: If a pointer leaves the document.
        ReferenceError_: If a pointer does not resolve or targets the wrong
            components table.
        CyclicReferenceError: If the chain loops back on itself.
    """
    chain: list[str] = []
    current = obj
    while is_reference(current):
        pointer = current["$ref"]
        if pointer in chain:
            raise CyclicReferenceError(chain + [pointer])
        chain.append(pointer)
        current = resolve_pointer(pointer, document, kind)
    return current


def resolve_all(
    objs: Iterable[Any],
    document: dict[str, Any],
    kind: Optional[ComponentKind] = None,
) -> Iterator[Any]:
    """Resolve every reference-or-item in *objs*, lazily and in order."""
    for obj in objs:
        yield resolve(obj, document, kind)


def resolve_pointer(
    pointer: Any,
    document: dict[str, Any],
    kind: Optional[ComponentKind] = None,
) -> Any:
    """Resolve a single ``$ref`` string against the root document.

    Parses JSON Pointer references like ``#/components/schemas/Pet`` and
    navigates the document to locate the referenced value. Handles RFC 6901
    escaping (``~0`` for ``~``, ``~1`` for ``/``).

    Args:
        pointer: The ``$ref`` value.
        document: The root document to resolve against.
        kind: Expected component kind (see :func:`resolve`).

    Returns:
        The value found at the pointer. It may itself be a reference.

    Raises:
        UnsupportedExternalReference: If *pointer* does not start with ``#``.
        ReferenceError_: If any segment does not exist or the pointer targets
            the wrong components table.
    """
    if not isinstance(pointer, str) or not pointer.startswith("#"):
        raise UnsupportedExternalReference(str(pointer))
    if pointer == "#":
        return document
    if not pointer.startswith("#/"):
        raise ReferenceError_(pointer, "only JSON pointers are supported")

    segments = [
        segment.replace("~1", "/").replace("~0", "~")
        for segment in pointer[2:].split("/")
    ]

    if (
        kind is not None
        and len(segments) >= 2
        and segments[0] == "components"
        and segments[1] != kind.value
    ):
        raise ReferenceError_(pointer, f"expected a reference to {kind.value}")

    current: Any = document
    for segment in segments:
        if isinstance(current, dict):
            if segment not in current:
                raise ReferenceError_(pointer, f"key '{segment}' not found")
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError):
                raise ReferenceError_(
                    pointer, f"invalid array index '{segment}'"
                ) from None
        else:
            raise ReferenceError_(
                pointer, f"cannot navigate into {type(current).__name__}"
            )

    return current
