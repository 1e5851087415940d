"""Number and integer inputs."""

from __future__ import annotations

import json
from typing import Optional, Union

from specreq.models import IntegerNode, NumberNode
from specreq.widgets.base import DEFAULT_CONTROLS, Controls
from specreq.widgets.text import TextInput
from specreq.widgets.validators import Number, check_number, parse_number


class NumberInput(TextInput):
    """Text input that submits an ``int`` or ``float``.

    Integer nodes only accept whole numbers; number nodes accept both and
    keep ``int`` when the input has no fractional part.
    """

    def __init__(
        self,
        node: Union[NumberNode, IntegerNode],
        message: str,
        description: Optional[str] = None,
        default: Optional[Number] = None,
        controls: Controls = DEFAULT_CONTROLS,
    ):
        text = json.dumps(default) if default is not None else None
        super().__init__(message, description, text, controls)
        self.node = node

    @property
    def integer(self) -> bool:
        return self.node.kind == "integer"

    def validate(self) -> None:
        check_number(parse_number(self.text, self.integer), self.node)

    def submit(self) -> Number:
        return parse_number(self.text, self.integer)
