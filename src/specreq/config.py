"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for specreq:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.specreq/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_data_dir`, :func:`get_profiles_dir`.
* **Global config** -- A single :class:`~specreq.models.GlobalConfig`
  JSON file storing defaults (default profile, output format).
* **Profiles** -- One JSON file per API, each deserialised into a
  :class:`~specreq.models.Profile`. Managed via :func:`load_profile`,
  :func:`save_profile`, :func:`delete_profile`.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`).
"""

from __future__ import annotations

import json
import os
import platform
import re
import tempfile
from pathlib import Path
from typing import Any, Optional

from specreq.exceptions import ConfigError
from specreq.models import GlobalConfig, Profile, RequestFormat

_APP_NAME = "specreq"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "specreq.json"
_PROFILE_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")

ENV_PROFILE = "SPECREQ_PROFILE"
ENV_BASE_URL = "SPECREQ_BASE_URL"
ENV_FORMAT = "SPECREQ_FORMAT"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    return Path.home().joinpath(*default_segments)


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/specreq/`` (default ``~/.config/specreq/``).
    On macOS/Windows: ``~/.specreq/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/specreq/`` (default ``~/.local/share/specreq/``).
    On macOS/Windows: ``~/.specreq/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_profiles_dir() -> Path:
    """Return ``<config_dir>/profiles/``, creating it if necessary."""
    path = get_config_dir() / "profiles"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created next to *path* so that ``os.replace`` is
    an atomic rename. On any failure the temp file is removed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


def _read_json(path: Path, what: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid {what} at {path}: {exc}") from exc


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration, or defaults if the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    data = _read_json(path, "global config")
    try:
        return GlobalConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Profiles ---


def _profile_path(name: str) -> Path:
    if not _PROFILE_NAME_RE.match(name):
        raise ConfigError(
            f"Invalid profile name '{name}': use letters, digits, '.', '_' and '-'"
        )
    return get_profiles_dir() / f"{name}.json"


def list_profiles() -> list[str]:
    """Return all profile names, sorted alphabetically."""
    return sorted(p.stem for p in get_profiles_dir().glob("*.json") if p.is_file())


def load_profile(name: str) -> Profile:
    """Load and validate a profile from disk.

    Raises:
        ConfigError: If the profile does not exist, contains invalid JSON,
            or fails validation.
    """
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigError(f"Profile '{name}' not found at {path}")
    data = _read_json(path, f"profile '{name}'")
    try:
        return Profile.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid profile '{name}' at {path}: {exc}") from exc


def save_profile(profile: Profile) -> None:
    """Persist a profile atomically; the file name is ``<profile.name>.json``."""
    data = profile.model_dump(mode="json")
    _atomic_write(_profile_path(profile.name), json.dumps(data, indent=2) + "\n")


def delete_profile(name: str) -> None:
    """Delete a profile.

    Raises:
        ConfigError: If the profile does not exist.
    """
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigError(f"Profile '{name}' not found at {path}")
    path.unlink()


def profile_exists(name: str) -> bool:
    return _profile_path(name).is_file()


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./specreq.json``.

    A repository typically uses it to pin ``default_profile``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    data = _read_json(path, "project config")
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def resolve_config(
    cli_profile: Optional[str] = None,
    cli_base_url: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> tuple[GlobalConfig, Optional[Profile]]:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_profile``, ``cli_base_url``, ``cli_format``)
        2. Environment variables (``SPECREQ_PROFILE``, ``SPECREQ_BASE_URL``,
           ``SPECREQ_FORMAT``)
        3. Project config (``./specreq.json``)
        4. User config (``~/.config/specreq/config.json``)
        5. Defaults

    When no profile is named anywhere and exactly one profile exists, it is
    selected automatically (unless ``auto_select_single_profile`` is off).

    Returns:
        A tuple of ``(global_config, active_profile_or_None)``. The
        profile's ``base_url`` already reflects CLI/env overrides.

    Raises:
        ConfigError: If a named profile cannot be loaded or the format is
            unknown.
    """
    global_cfg = load_global_config()
    project = load_project_config() or {}

    profile_name: Optional[str] = global_cfg.default_profile
    if project.get("default_profile"):
        profile_name = project["default_profile"]
    if os.environ.get(ENV_PROFILE):
        profile_name = os.environ[ENV_PROFILE]
    if cli_profile is not None:
        profile_name = cli_profile

    if profile_name is None and global_cfg.auto_select_single_profile:
        profiles = list_profiles()
        if len(profiles) == 1:
            profile_name = profiles[0]

    profile: Optional[Profile] = None
    if profile_name is not None:
        profile = load_profile(profile_name)

    base_url = cli_base_url or os.environ.get(ENV_BASE_URL)
    if base_url and profile is not None:
        profile.base_url = base_url

    fmt = cli_format or os.environ.get(ENV_FORMAT) or project.get("format")
    if fmt:
        try:
            global_cfg.format = RequestFormat(fmt)
        except ValueError:
            raise ConfigError(f"Unknown format '{fmt}': use curl or fetch") from None

    return global_cfg, profile
