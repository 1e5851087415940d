"""Location-specific encoding rules for collected parameter values.

* **path** -- every ``{name}`` occurrence in the template is replaced
  literally by the value's textual form (see :func:`~specreq.values.to_text`).
* **query** -- absent values and ``false`` are dropped, ``true`` becomes a
  bare flag (``?active``), everything else is ``name=value`` with arrays
  comma-joined.
* **header** / **cookie** -- the textual form, as-is; absent values are
  dropped.
"""

from __future__ import annotations

import re
from typing import Any, Optional
from urllib.parse import quote

from specreq.values import is_absent, to_text

_PLACEHOLDER_RE = re.compile(r"\{([^{}/]+)\}")


def path_placeholders(template: str) -> list[str]:
    """Return placeholder names in *template*, in order, without duplicates."""
    seen: list[str] = []
    for name in _PLACEHOLDER_RE.findall(template):
        if name not in seen:
            seen.append(name)
    return seen


def substitute_path(template: str, name: str, value: Any) -> str:
    """Replace every ``{name}`` in *template* with the textual form of *value*."""
    return template.replace("{" + name + "}", to_text(value))


def encode_query(name: str, value: Any) -> Optional[tuple[str, Optional[str]]]:
    """Encode one query parameter.

    Returns:
        ``None`` when the parameter is omitted entirely (absent, ``None`` or
        ``False``), ``(name, None)`` for a bare flag (``True``), and
        ``(name, text)`` otherwise.
    """
    if is_absent(value) or value is None or value is False:
        return None
    if value is True:
        return (name, None)
    return (name, to_text(value))


def encode_pair(name: str, value: Any) -> Optional[tuple[str, str]]:
    """Encode a header or cookie value, dropping absent ones."""
    if is_absent(value):
        return None
    return (name, to_text(value))


def render_query(query: list[tuple[str, Optional[str]]]) -> str:
    """Join encoded query pairs into a query string (without the ``?``).

    Names and values are percent-encoded; commas in values are kept so that
    comma-joined arrays stay readable.
    """
    parts = []
    for name, value in query:
        key = quote(name, safe="")
        if value is None:
            parts.append(key)
        else:
            parts.append(f"{key}={quote(value, safe=',')}")
    return "&".join(parts)
