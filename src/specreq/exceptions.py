"""Exception hierarchy for specreq.

All fatal errors inherit from :class:`SpecreqError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specreq.exit_codes`.
The top-level error handler in :func:`specreq.app.main` catches
``SpecreqError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Two classes sit outside that hierarchy on purpose:

* :class:`ValidationError` -- raised by a widget's ``validate()`` when the
  user input breaks a declared facet. It is always absorbed by the session
  driver or the enclosing composite widget and never reaches the top level.
* :class:`PromptCancelled` -- the user abandoned the prompt sequence. It is
  a control-flow outcome, not a failure, and maps to exit code 0.

Subclass hierarchy::

    SpecreqError (exit 1)
    +-- InvalidUsageError              (exit 2)
    +-- ConfigError                    (exit 1)
    +-- MissingServerError             (exit 1)
    +-- NotFoundError                  (exit 4)
    +-- SpecParseError                 (exit 7)
    +-- SchemaError                    (exit 8)
    |   +-- ReferenceError_
    |   +-- UnsupportedExternalReference
    |   +-- CyclicReferenceError
    |   +-- UnsupportedSchemaError
    +-- PromptError                    (exit 9)
"""

from __future__ import annotations

from specreq.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_PROMPT_ERROR,
    EXIT_SCHEMA_ERROR,
    EXIT_SPEC_PARSE_ERROR,
)


class SpecreqError(Exception):
    """Base exception for all specreq errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specreq.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecreqError):
    """Raised for invalid CLI arguments or override values of the wrong type."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(SpecreqError):
    """Raised for configuration problems (missing profiles, invalid JSON)."""

    exit_code = EXIT_GENERIC_FAILURE


class MissingServerError(SpecreqError):
    """Raised when no base URL was given and the document declares no servers."""

    def __init__(self, message: str = "No servers in schema. Pass --base-url."):
        super().__init__(message)


class NotFoundError(SpecreqError):
    """Raised when a pre-selected path or method is not in the document."""

    exit_code = EXIT_NOT_FOUND


class SpecParseError(SpecreqError):
    """Raised when the OpenAPI document cannot be loaded or fails version checks."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class SchemaError(SpecreqError):
    """Raised when a reference or schema construct cannot be turned into a prompt.

    Always fatal to the current operation's prompt sequence and never retried.
    """

    exit_code = EXIT_SCHEMA_ERROR


class ReferenceError_(SchemaError):
    """Raised when an internal ``$ref`` pointer does not resolve.

    Named with a trailing underscore to avoid shadowing the built-in
    ``ReferenceError``.

    Args:
        pointer: The unresolved ``$ref`` string.
        reason: Optional detail appended to the message.
    """

    def __init__(self, pointer: str, reason: str | None = None):
        message = f"Reference error: failed to resolve reference {pointer}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.pointer = pointer


class UnsupportedExternalReference(SchemaError):
    """Raised for ``$ref`` pointers that leave the current document."""

    def __init__(self, pointer: str):
        super().__init__(
            f"Unsupported external reference {pointer}. Please bundle your schema"
        )
        self.pointer = pointer


class CyclicReferenceError(SchemaError):
    """Raised when a schema (directly or indirectly) references itself.

    Args:
        chain: The ``$ref`` pointers on the resolution stack, ending with the
            pointer that closed the cycle.
    """

    def __init__(self, chain: list[str]):
        super().__init__(f"Cyclic schema reference: {' -> '.join(chain)}")
        self.chain = list(chain)


class UnsupportedSchemaError(SchemaError):
    """Raised for schema constructs that cannot be prompted for.

    Covers ``not``, schemas without any type information, parameters
    described by ``content`` and request bodies that are not
    ``application/json``.
    """


class PromptError(SpecreqError):
    """Raised when a widget fails to initialise or the terminal fails."""

    exit_code = EXIT_PROMPT_ERROR


class ValidationError(ValueError):
    """Raised by ``Widget.validate()`` when input breaks a declared facet.

    Never propagated past the session driver: the offending widget stays
    active and shows :attr:`message` on its next render.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PromptCancelled(Exception):
    """The user abandoned the prompt sequence.

    Not an error: the entry point reports "Cancelled." and exits with
    code 0.

    Args:
        message: Label of the prompt that was active when the user cancelled.
    """

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message
