"""Load OpenAPI documents from a local file, a URL, or stdin.

The loader is the only part of specreq that touches raw bytes. It returns
the document as plain ``dict``/``list`` data; ``$ref`` pointers are left in
place and resolved lazily by :mod:`specreq.parser.resolver` as the
assembler visits them.

The two public functions are:

* :func:`load_document` -- read and parse JSON or YAML from any source.
* :func:`validate_openapi_version` -- accept OpenAPI 3.x, reject Swagger 2.x.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from specreq.exceptions import SpecParseError

_EXTENSIONS = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}


def load_document(source: str) -> dict[str, Any]:
    """Load an OpenAPI document from a file path, an http(s) URL, or ``-``.

    Files must end in ``.json``, ``.yaml`` or ``.yml``; URL and stdin
    content is detected from the payload.

    Args:
        source: A file path, a URL, or ``-`` for stdin.

    Returns:
        The parsed document.

    Raises:
        SpecParseError: If the source cannot be read or parsed.
    """
    if source == "-":
        return _load_stdin()
    if source.startswith(("http://", "https://")):
        return _load_url(source)
    return _load_file(Path(source))


def _load_stdin() -> dict[str, Any]:
    if sys.stdin.isatty():
        raise SpecParseError("No document on stdin (it is a terminal)")
    content = sys.stdin.read()
    if not content.strip():
        raise SpecParseError("No input received from stdin")
    return _parse(content, "", "stdin")


def _load_url(url: str) -> dict[str, Any]:
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch document from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = "json" if "json" in content_type else ("yaml" if "yaml" in content_type else "")
    return _parse(response.text, hint, url)


def _load_file(path: Path) -> dict[str, Any]:
    hint = _EXTENSIONS.get(path.suffix.lower())
    if hint is None:
        raise SpecParseError(
            f"Unsupported extension for {path}: use .json, .yaml or .yml"
        )
    if not path.is_file():
        raise SpecParseError(f"Document not found: {path}")
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read {path}: {exc}") from exc
    if not content.strip():
        raise SpecParseError(f"Document is empty: {path}")
    return _parse(content, hint, str(path))


def _parse(content: str, hint: str, origin: str) -> dict[str, Any]:
    """Parse *content* as JSON or YAML.

    Unless hinted as YAML, JSON is tried first because it is stricter and
    faster; valid JSON is also valid YAML, so YAML is the fallback.
    """
    if hint == "yaml":
        result = _parse_yaml(content, origin)
    else:
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecParseError(f"Parse failed: invalid JSON in {origin}: {exc}") from exc
            result = _parse_yaml(content, origin)

    if not isinstance(result, dict):
        found = type(result).__name__ if result is not None else "empty document"
        raise SpecParseError(f"Document must be a JSON/YAML object (got {found})")
    return result


def _parse_yaml(content: str, origin: str) -> Any:
    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise SpecParseError(f"Parse failed: invalid YAML in {origin}: {exc}") from exc


def validate_openapi_version(document: dict[str, Any]) -> str:
    """Validate and return the OpenAPI version string.

    Args:
        document: The parsed document.

    Returns:
        The ``openapi`` version string (e.g. ``"3.0.3"``, ``"3.1.0"``).

    Raises:
        SpecParseError: For Swagger 2.x, a missing ``openapi`` field, or a
            major version other than 3.
    """
    if "swagger" in document:
        raise SpecParseError(
            f"Swagger {document['swagger']} is not supported. "
            "Only OpenAPI 3.x documents are accepted. "
            "Consider converting with https://converter.swagger.io"
        )

    version = document.get("openapi")
    if version is None:
        raise SpecParseError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")

    version_str = str(version)
    if not version_str.startswith("3."):
        raise SpecParseError(
            f"Unsupported OpenAPI version: {version_str}. Only 3.x is supported."
        )
    return version_str
