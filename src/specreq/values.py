"""Helpers for collected values.

A collected value is plain JSON data (``None``, ``bool``, ``int``, ``float``,
``str``, ``list`` or ``dict``) produced by a widget's ``submit()``, or the
:data:`ABSENT` sentinel when the user skipped an optional field. ``ABSENT``
is distinct from ``None``: an absent object property is left out of the
result, while ``None`` would be serialised as ``null``.
"""

from __future__ import annotations

import json
import math
from typing import Any

from specreq.exceptions import InvalidUsageError


class _Absent:
    """Singleton type of :data:`ABSENT`."""

    _instance: "_Absent | None" = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()
"""Marker for "no value" (a skipped optional field)."""


def is_absent(value: Any) -> bool:
    return value is ABSENT


def matches_tag(kind: str, value: Any) -> bool:
    """Return ``True`` when *value* has the JSON type named by *kind*.

    ``bool`` is never accepted as a number even though it subclasses ``int``.
    Composite kinds only check the outer container type.
    """
    if kind == "string":
        return isinstance(value, str)
    if kind == "boolean":
        return isinstance(value, bool)
    if kind == "integer":
        if isinstance(value, bool):
            return False
        return isinstance(value, int) or (isinstance(value, float) and value.is_integer())
    if kind == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if kind == "array":
        return isinstance(value, list)
    if kind == "object":
        return isinstance(value, dict)
    return False


def _finite_float(text: str) -> float:
    value = float(text)
    if math.isinf(value):
        raise ValueError(f"{text} is out of range")
    return value


def _no_constant(text: str) -> float:
    raise ValueError(f"{text} is not a JSON number")


def coerce_override(kind: str, value: Any, name: str) -> Any:
    """Turn a caller-supplied override into a value of the expected kind.

    Command-line overrides arrive as raw strings. A string is used verbatim
    for ``string`` parameters and parsed as a JSON literal for every other
    kind; values that already have a JSON type are only checked.

    Args:
        kind: The schema tag of the parameter or property.
        value: The override as supplied by the caller.
        name: Parameter or property name, used in error messages.

    Returns:
        The value, converted where needed (``"42"`` becomes ``42`` for an
        integer parameter, ``"7.0"`` becomes ``7``).

    Raises:
        InvalidUsageError: If the value does not match *kind*.
    """
    if isinstance(value, str) and kind != "string":
        try:
            value = json.loads(value, parse_float=_finite_float, parse_constant=_no_constant)
        except ValueError:
            raise InvalidUsageError(
                f"Invalid value for '{name}': expected {kind}, got {value!r}"
            ) from None

    if not matches_tag(kind, value) or (isinstance(value, float) and not math.isfinite(value)):
        raise InvalidUsageError(
            f"Invalid value for '{name}': expected {kind}, got {value!r}"
        )

    if kind == "integer" and isinstance(value, float):
        return int(value)
    return value


def to_text(value: Any) -> str:
    """Return the textual form used for path, header and cookie values.

    Booleans become ``true``/``false``, numbers use their JSON spelling,
    arrays are comma-joined (nested ``None`` items are dropped), ``None``
    becomes the empty string and objects are compact JSON.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return json.dumps(value)
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return ",".join(to_text(item) for item in value if item is not None)
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def to_json(value: Any) -> str:
    """Compact JSON used for request bodies and submitted-value previews."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
