"""OpenAPI document access -- load documents and resolve ``$ref`` pointers.

Typical usage::

    from specreq.parser import load_document, validate_openapi_version, resolve

    document = load_document("openapi.yaml")
    validate_openapi_version(document)
    schema = resolve({"$ref": "#/components/schemas/Pet"}, document)

Sub-modules:

* :mod:`~specreq.parser.loader` -- I/O layer (file, URL, stdin) plus format
  detection and OpenAPI version validation.
* :mod:`~specreq.parser.resolver` -- Lazy, one-indirection-at-a-time
  ``$ref`` resolution against the document's components tables.
"""

from specreq.parser.loader import load_document, validate_openapi_version
from specreq.parser.resolver import ComponentKind, resolve

__all__ = ["load_document", "validate_openapi_version", "resolve", "ComponentKind"]
