"""Interactive widgets.

:mod:`~specreq.widgets.base` defines the protocol; leaf widgets cover
strings, passwords, dates, numbers, booleans and selection lists;
:class:`ArrayPrompt` and :class:`ObjectPrompt` sequence child widgets and
:class:`Skippable` makes any widget optional.
"""

from specreq.widgets.array import ArrayPrompt
from specreq.widgets.base import (
    DEFAULT_CONTROLS,
    Controls,
    Key,
    KeyEvent,
    PromptState,
    RenderPayload,
    Widget,
)
from specreq.widgets.boolean import Confirm
from specreq.widgets.date import DatePicker
from specreq.widgets.number import NumberInput
from specreq.widgets.obj import ObjectPrompt
from specreq.widgets.select import Select, SelectOption
from specreq.widgets.skippable import Skippable
from specreq.widgets.string import PasswordInput, StringInput

__all__ = [
    "DEFAULT_CONTROLS",
    "Controls",
    "Key",
    "KeyEvent",
    "PromptState",
    "RenderPayload",
    "Widget",
    "ArrayPrompt",
    "Confirm",
    "DatePicker",
    "NumberInput",
    "ObjectPrompt",
    "PasswordInput",
    "Select",
    "SelectOption",
    "Skippable",
    "StringInput",
]
