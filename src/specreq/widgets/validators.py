"""Facet checks for strings, numbers and arrays.

Each check raises :class:`~specreq.exceptions.ValidationError` with the
message shown under the offending prompt.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Optional, Pattern, Union

from specreq.exceptions import ValidationError
from specreq.models import ArrayNode, IntegerNode, NumberNode, StringNode

Number = Union[int, float]


def check_string(value: str, node: StringNode, pattern: Optional[Pattern[str]] = None) -> None:
    """Enforce ``pattern``, ``minLength`` and ``maxLength``.

    ``pattern`` is matched anywhere in the value (unanchored), as JSON
    Schema specifies.
    """
    if pattern is not None and not pattern.search(value):
        raise ValidationError(f"Value does not match pattern: {pattern.pattern}")
    if node.min_length is not None and len(value) < node.min_length:
        raise ValidationError(f"Value is too short. Minimum length is {node.min_length}")
    if node.max_length is not None and len(value) > node.max_length:
        raise ValidationError(f"Value is too long. Maximum length is {node.max_length}")


def parse_number(text: str, integer: bool) -> Number:
    """Parse user input as an integer or a finite real.

    Raises:
        ValidationError: If *text* is not a number of the requested kind.
    """
    text = text.strip()
    try:
        return int(text)
    except ValueError:
        pass
    if integer:
        raise ValidationError("Value is not an integer")
    try:
        value = float(text)
    except ValueError:
        raise ValidationError("Value is not a number") from None
    if math.isnan(value) or math.isinf(value):
        raise ValidationError("Value is not a number")
    return value


def check_number(value: Number, node: Union[NumberNode, IntegerNode]) -> None:
    """Enforce bounds and ``multipleOf``.

    An exclusive minimum ``m`` means ``value > m`` and an exclusive
    maximum ``M`` means ``value < M``.
    """
    low, high = node.minimum, node.maximum
    below = low is not None and (value <= low if node.exclusive_minimum else value < low)
    above = high is not None and (value >= high if node.exclusive_maximum else value > high)

    if (below or above) and low is not None and high is not None:
        raise ValidationError(f"Value must be between {_fmt(low)} and {_fmt(high)}")
    if below:
        if node.exclusive_minimum:
            raise ValidationError(f"Value must be greater than {_fmt(low)}")
        raise ValidationError(f"Value must be greater than or equal to {_fmt(low)}")
    if above:
        if node.exclusive_maximum:
            raise ValidationError(f"Value must be less than {_fmt(high)}")
        raise ValidationError(f"Value must be less than or equal to {_fmt(high)}")

    if node.multiple_of and not _is_multiple(value, node.multiple_of):
        raise ValidationError(f"Value must be a multiple of {_fmt(node.multiple_of)}")


def check_array(items: list, node: ArrayNode) -> None:
    if node.min_items is not None and len(items) < node.min_items:
        raise ValidationError(f"Array must have at least {node.min_items} items")


def _is_multiple(value: Number, step: Number) -> bool:
    # Decimal avoids 0.3 % 0.1 != 0
    try:
        return Decimal(str(value)) % Decimal(str(step)) == 0
    except InvalidOperation:
        return False


def _fmt(bound: Number) -> str:
    if isinstance(bound, float) and bound.is_integer():
        return str(int(bound))
    return str(bound)


def compile_pattern(pattern: Optional[str]) -> Optional[Pattern[str]]:
    """Compile a ``pattern`` facet; ``re.error`` propagates to the caller."""
    return re.compile(pattern) if pattern else None
