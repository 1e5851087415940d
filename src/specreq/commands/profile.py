"""Profile commands -- manage saved API profiles.

Provides the ``specreq profile`` sub-command group. A profile remembers
where an OpenAPI document lives, an optional base URL, and headers that
are appended to every request built with it.
"""

from __future__ import annotations

from typing import Optional

import typer

from specreq.output import info, print_table, success, suggest


profile_app = typer.Typer(no_args_is_help=True)


@profile_app.command("add")
def profile_add(
    name: str = typer.Argument(help="Profile name (letters, digits, '.', '_', '-')."),
    spec: str = typer.Argument(help="OpenAPI document: file path, URL, or '-' for stdin."),
    base_url: Optional[str] = typer.Option(None, "--base-url", "-b", help="Override base URL."),
    headers: Optional[list[str]] = typer.Option(
        None, "--header", "-H", help="Header sent with every request ('Name: value'). Repeatable."
    ),
    use: bool = typer.Option(False, "--use", help="Make this the default profile."),
) -> None:
    """Create or overwrite a profile.

    Example::

        specreq profile add petstore ./openapi.yaml -b http://localhost:8080
        specreq profile add prod https://api.example.com/openapi.json -H 'X-Env: prod' --use
    """
    from specreq.app import parse_headers
    from specreq.config import profile_exists, save_profile
    from specreq.models import Profile

    if profile_exists(name):
        info(f'Profile "{name}" already exists and will be overwritten.')

    save_profile(Profile(name=name, spec=spec, base_url=base_url, headers=parse_headers(headers)))
    success(f'Profile "{name}" saved.')

    if use:
        _set_default(name)
    else:
        suggest(f"Make it the default: specreq profile use {name}")


@profile_app.command("list")
def profile_list() -> None:
    """List saved profiles; the default one is marked with ``*``."""
    from specreq.config import list_profiles, load_global_config, load_profile

    names = list_profiles()
    if not names:
        info("No profiles saved.")
        suggest("Create one: specreq profile add NAME SPEC")
        return

    default = load_global_config().default_profile
    rows = []
    for name in names:
        profile = load_profile(name)
        rows.append(["*" if name == default else "", name, profile.spec, profile.base_url or ""])
    print_table(["", "Name", "Spec", "Base URL"], rows)


@profile_app.command("remove")
def profile_remove(
    name: str = typer.Argument(help="Profile to delete."),
) -> None:
    """Delete a profile, clearing it as the default if it was one."""
    from specreq.config import delete_profile, load_global_config, save_global_config

    delete_profile(name)
    config = load_global_config()
    if config.default_profile == name:
        config.default_profile = None
        save_global_config(config)
    success(f'Profile "{name}" removed.')


@profile_app.command("use")
def profile_use(
    name: str = typer.Argument(help="Profile to make the default."),
) -> None:
    """Set the default profile used when ``--profile`` is not given."""
    from specreq.config import load_profile

    load_profile(name)
    _set_default(name)


def _set_default(name: str) -> None:
    from specreq.config import load_global_config, save_global_config

    config = load_global_config()
    config.default_profile = name
    save_global_config(config)
    success(f'Default profile set to "{name}".')
