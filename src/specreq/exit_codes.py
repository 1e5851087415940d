"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specreq.exceptions.SpecreqError` subclass.
Shell wrappers can inspect the exit code to tell a broken document apart
from a bad command line without parsing stderr.

Example::

    $ specreq request broken.yaml
    $ echo $?
    8   # EXIT_SCHEMA_ERROR -- a $ref could not be resolved
"""

EXIT_SUCCESS = 0
"""The request was built, or the user cancelled the prompt sequence."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or a malformed override value."""

EXIT_NOT_FOUND = 4
"""The selected path or method does not exist in the document."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI document could not be loaded or is not OpenAPI 3.x."""

EXIT_SCHEMA_ERROR = 8
"""A reference or schema construct in the document cannot be handled."""

EXIT_PROMPT_ERROR = 9
"""An interactive prompt failed to initialise or the terminal failed."""

EXIT_INTERRUPTED = 130
"""The process received SIGINT outside of an interactive prompt."""
