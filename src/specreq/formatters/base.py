"""Shared pieces of the request formatters."""

from __future__ import annotations

from abc import ABC, abstractmethod

from specreq.encoding import render_query
from specreq.models import RequestDescriptor


class RequestFormatter(ABC):
    """Turns a finished request descriptor into text."""

    #: Pygments lexer used to highlight the output on a TTY.
    lexer: str = "text"

    @abstractmethod
    def format(self, request: RequestDescriptor) -> str: ...


def build_url(request: RequestDescriptor) -> str:
    """Join base URL, substituted path and encoded query string."""
    url = request.base_url.rstrip("/") + request.path
    query = render_query(request.query)
    return f"{url}?{query}" if query else url


def shell_quote(text: str) -> str:
    """Single-quote *text* for a POSIX shell (``'`` becomes ``'\\''``)."""
    return "'" + text.replace("'", "'\\''") + "'"


def js_string(text: str) -> str:
    """Single-quoted JavaScript string literal."""
    escaped = text.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n")
    return f"'{escaped}'"
