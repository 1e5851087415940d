"""Typer application and CLI entry point for specreq.

Commands:

* ``specreq request [SPEC]`` -- interactively build a request for one
  operation and print it as curl arguments or a ``fetch()`` call.
* ``specreq paths [SPEC]`` -- list the document's operations.
* ``specreq profile ...`` -- manage saved profiles (see
  :mod:`specreq.commands.profile`).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It maps :class:`~specreq.exceptions.SpecreqError` to
exit codes, treats :class:`~specreq.exceptions.PromptCancelled` as a clean
exit, and writes a crash log for anything unexpected.

See Also:
    :mod:`specreq.config`: Profile and global configuration resolution.
    :mod:`specreq.output`: Output initialised in :func:`main_callback`.
"""

from __future__ import annotations

import os
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from specreq import __version__
from specreq.commands.profile import profile_app
from specreq.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED, EXIT_SUCCESS
from specreq.models import RequestFormat

app = typer.Typer(
    name="specreq",
    help="Build HTTP requests interactively from OpenAPI 3.x documents.",
    no_args_is_help=True,
    add_completion=True,
    rich_markup_mode="rich",
)
app.add_typer(profile_app, name="profile", help="Profile management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"specreq {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback: installs the global OutputManager from CLI flags."""
    from specreq.output import OutputManager, set_output

    set_output(OutputManager(no_color=no_color, quiet=quiet, verbose=verbose))


# ------------------------------------------------------------------ #
# Option parsing helpers
# ------------------------------------------------------------------ #


def parse_pairs(items: Optional[list[str]], option: str) -> dict[str, str]:
    """Parse repeated ``name=value`` options into a dict (last one wins)."""
    from specreq.exceptions import InvalidUsageError

    pairs: dict[str, str] = {}
    for item in items or []:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise InvalidUsageError(f"Invalid {option} value '{item}': expected name=value")
        pairs[name.strip()] = value
    return pairs


def parse_headers(items: Optional[list[str]]) -> dict[str, str]:
    """Parse repeated ``'Name: value'`` options."""
    from specreq.exceptions import InvalidUsageError

    headers: dict[str, str] = {}
    for item in items or []:
        name, sep, value = item.partition(":")
        if not sep or not name.strip():
            raise InvalidUsageError(f"Invalid --header value '{item}': expected 'Name: value'")
        headers[name.strip()] = value.strip()
    return headers


def _load(spec: Optional[str], profile_spec: Optional[str]) -> dict[str, Any]:
    from specreq.exceptions import InvalidUsageError
    from specreq.output import debug
    from specreq.parser import load_document, validate_openapi_version

    source = spec or profile_spec
    if source is None:
        raise InvalidUsageError("No OpenAPI document given. Pass SPEC or configure a profile.")
    debug(f"Loading document from {source}")
    document = load_document(source)
    version = validate_openapi_version(document)
    debug(f"OpenAPI {version}")
    return document


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("request")
def request_command(
    spec: Optional[str] = typer.Argument(
        None, help="OpenAPI document: file path, URL, or '-' for stdin."
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", "-b", help="Base URL (default: first server in the document)."
    ),
    path: Optional[str] = typer.Option(None, "--path", "-p", help="Path template, e.g. '/pets/{id}'."),
    method: Optional[str] = typer.Option(None, "--request", "-X", help="HTTP method."),
    params: Optional[list[str]] = typer.Option(
        None, "--param", "-P", help="Path parameter value (name=value). Repeatable."
    ),
    queries: Optional[list[str]] = typer.Option(
        None, "--query", "-q", help="Query parameter value (name=value). Repeatable."
    ),
    headers: Optional[list[str]] = typer.Option(
        None, "--header", "-H", help="Header ('Name: value'). Repeatable."
    ),
    cookies: Optional[list[str]] = typer.Option(
        None, "--cookie", "-c", help="Cookie value (name=value). Repeatable."
    ),
    fields: Optional[list[str]] = typer.Option(
        None, "--field", "-f", help="Request body property (name=value). Repeatable."
    ),
    fmt: Optional[RequestFormat] = typer.Option(
        None, "--format", "-F", help="Output format.", case_sensitive=False
    ),
    profile: Optional[str] = typer.Option(None, "--profile", help="Profile name to use."),
) -> None:
    """Prompt for every value an operation needs and print the request.

    Values given on the command line are not prompted for. Non-string
    values are parsed as JSON literals (``-P id=42``, ``-q tags='["a"]'``).

    Example::

        specreq request openapi.yaml -p '/pets/{id}' -X get -P id=7
        specreq request -F fetch | pbcopy
    """
    from specreq.assembler import RequestAssembler
    from specreq.compiler import PromptCompiler
    from specreq.config import ENV_BASE_URL, resolve_config
    from specreq.formatters import format_request, get_formatter
    from specreq.models import RequestOverrides
    from specreq.output import get_output, print_code
    from specreq.session import SessionDriver
    from specreq.terminal import ConsoleTerminal
    from specreq.widgets import DEFAULT_CONTROLS

    config, active = resolve_config(profile, base_url, fmt.value if fmt else None)
    document = _load(spec, active.spec if active else None)

    if active is not None:
        base = active.base_url
    else:
        base = base_url or os.environ.get(ENV_BASE_URL)

    overrides = RequestOverrides(
        path=parse_pairs(params, "--param"),
        query=parse_pairs(queries, "--query"),
        header=parse_headers(headers),
        cookie=parse_pairs(cookies, "--cookie"),
        fields=parse_pairs(fields, "--field"),
    )

    terminal = ConsoleTerminal(no_color=config.no_color or get_output().no_color)
    assembler = RequestAssembler(
        document,
        SessionDriver(terminal),
        PromptCompiler(DEFAULT_CONTROLS),
        base_url=base,
    )
    descriptor = assembler.assemble(
        path=path,
        method=method,
        overrides=overrides,
        extra_headers=list(active.headers.items()) if active else [],
    )
    print_code(format_request(descriptor, config.format), get_formatter(config.format).lexer)


@app.command("paths")
def paths_command(
    spec: Optional[str] = typer.Argument(
        None, help="OpenAPI document: file path, URL, or '-' for stdin."
    ),
    profile: Optional[str] = typer.Option(None, "--profile", help="Profile name to use."),
) -> None:
    """List the operations (method, path, summary) in a document."""
    from specreq.assembler import list_operations
    from specreq.config import resolve_config
    from specreq.output import info, print_table

    _, active = resolve_config(profile)
    document = _load(spec, active.spec if active else None)

    operations = list_operations(document)
    if not operations:
        info("No operations found.")
        return
    rows = [
        [
            op.method.label,
            op.path,
            (op.summary or "") + (" (deprecated)" if op.deprecated else ""),
        ]
        for op in operations
    ]
    title = (document.get("info") or {}).get("title")
    print_table(["Method", "Path", "Summary"], rows, title=title)


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C outside a prompt exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback under the data directory and return its path."""
    from specreq.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``specreq`` console script.

    :class:`~specreq.exceptions.SpecreqError` exits with the error's
    ``exit_code``; a cancelled prompt prints "Cancelled." and exits 0; any
    other exception produces a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as exc:
        from specreq.exceptions import PromptCancelled, SpecreqError
        from specreq.output import error, info

        if isinstance(exc, PromptCancelled):
            info("Cancelled.")
            sys.exit(EXIT_SUCCESS)
        if isinstance(exc, SpecreqError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
