"""specreq -- Build ready-to-run HTTP requests from OpenAPI 3.x documents.

This package walks an OpenAPI operation interactively, collecting a value for
every path segment, query parameter, header, cookie and JSON request body,
and prints the result as a literal ``curl`` argument list or a ``fetch()``
call.

Typical workflow::

    specreq request openapi.yaml                     # pick path + method
    specreq request openapi.yaml -p /pets/{id} -X GET -P id=7

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and profile management.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    assembler: Turns an operation into a :class:`~specreq.models.RequestDescriptor`.
"""

__version__ = "0.3.0"
