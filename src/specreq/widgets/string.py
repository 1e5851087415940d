"""String inputs: free text and masked passwords."""

from __future__ import annotations

import re
from typing import Optional

from specreq.exceptions import PromptError
from specreq.models import StringNode
from specreq.widgets.base import DEFAULT_CONTROLS, Controls, PromptState
from specreq.widgets.text import TextInput
from specreq.widgets.validators import check_string, compile_pattern


class StringInput(TextInput):
    """Text input validated against a string node's facets."""

    def __init__(
        self,
        node: StringNode,
        message: str,
        description: Optional[str] = None,
        default: Optional[str] = None,
        controls: Controls = DEFAULT_CONTROLS,
    ):
        super().__init__(message, description, default, controls)
        self.node = node
        self._pattern: Optional[re.Pattern[str]] = None

    def initialize(self) -> PromptState:
        try:
            self._pattern = compile_pattern(self.node.pattern)
        except re.error as exc:
            raise PromptError(f"Invalid pattern for {self.message}: {exc}") from exc
        return PromptState.ACTIVE

    def validate(self) -> None:
        check_string(self.text, self.node, self._pattern)


class PasswordInput(StringInput):
    """String input that echoes ``#`` for every character. Not confirmed."""

    mask = "#"
