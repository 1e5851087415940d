"""Tests for specreq.config -- XDG paths, atomic writes, profiles, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from specreq.config import (
    _atomic_write,
    delete_profile,
    get_config_dir,
    get_data_dir,
    get_profiles_dir,
    list_profiles,
    load_global_config,
    load_profile,
    load_project_config,
    profile_exists,
    resolve_config,
    save_global_config,
    save_profile,
)
from specreq.exceptions import ConfigError
from specreq.models import GlobalConfig, Profile, RequestFormat


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write *data* as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def _make_profile(name: str = "test", spec: str = "https://api.example.com/openapi.json") -> Profile:
    return Profile(name=name, spec=spec)


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestXDGPaths:
    def test_config_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("specreq.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".config" / "specreq"
        assert result.is_dir()

    def test_config_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_config"
        monkeypatch.setattr("specreq.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(custom))

        assert get_config_dir() == custom / "specreq"

    def test_data_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("specreq.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_data_dir()
        assert result == tmp_path / ".local" / "share" / "specreq"
        assert result.is_dir()

    def test_fallback_paths(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("specreq.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_config_dir() == tmp_path / ".specreq"
        assert get_data_dir() == tmp_path / ".specreq" / "logs"

    def test_profiles_dir_is_inside_config_dir(self, isolated_config: Path) -> None:
        assert get_profiles_dir() == get_config_dir() / "profiles"
        assert get_profiles_dir().is_dir()


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_creates_file_with_content(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b" / "test.txt"
        _atomic_write(target, "hello 世界")
        assert target.read_text(encoding="utf-8") == "hello 世界"

    def test_overwrites_existing_file(self, tmp_path: Path) -> None:
        target = tmp_path / "test.txt"
        target.write_text("old content", encoding="utf-8")
        _atomic_write(target, "new content")
        assert target.read_text(encoding="utf-8") == "new content"
        assert list(tmp_path.iterdir()) == [target]

    def test_no_temp_files_left_on_error(self, tmp_path: Path) -> None:
        target = tmp_path / "test.txt"
        with patch("specreq.config.os.fsync", side_effect=OSError("disk error")):
            with pytest.raises(OSError, match="disk error"):
                _atomic_write(target, "will fail")
        assert list(tmp_path.iterdir()) == []


# ---------------------------------------------------------------------------
# Global config
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_defaults_when_missing(self, isolated_config: Path) -> None:
        config = load_global_config()
        assert config == GlobalConfig()
        assert config.format is RequestFormat.CURL

    def test_save_and_load_roundtrip(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(default_profile="petstore", format=RequestFormat.FETCH))
        config = load_global_config()
        assert config.default_profile == "petstore"
        assert config.format is RequestFormat.FETCH

    def test_invalid_json(self, isolated_config: Path) -> None:
        (get_config_dir() / "config.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_invalid_schema(self, isolated_config: Path) -> None:
        _write_json(get_config_dir() / "config.json", {"format": "wget"})
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


class TestProfiles:
    def test_list_empty(self, isolated_config: Path) -> None:
        assert list_profiles() == []

    def test_save_load_and_list(self, isolated_config: Path) -> None:
        save_profile(Profile(name="b", spec="b.yaml", headers={"X-Key": "1"}))
        save_profile(_make_profile("a"))
        assert list_profiles() == ["a", "b"]
        loaded = load_profile("b")
        assert loaded.spec == "b.yaml"
        assert loaded.headers == {"X-Key": "1"}
        assert loaded.base_url is None

    def test_extra_fields_preserved(self, isolated_config: Path) -> None:
        _write_json(get_profiles_dir() / "x.json", {"name": "x", "spec": "x.json", "note": "hi"})
        assert load_profile("x").model_extra == {"note": "hi"}

    def test_load_missing(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError, match="Profile 'nope' not found"):
            load_profile("nope")

    def test_load_invalid(self, isolated_config: Path) -> None:
        _write_json(get_profiles_dir() / "bad.json", {"name": "bad"})
        with pytest.raises(ConfigError, match="Invalid profile 'bad'"):
            load_profile("bad")

    def test_delete(self, isolated_config: Path) -> None:
        save_profile(_make_profile("gone"))
        assert profile_exists("gone")
        delete_profile("gone")
        assert not profile_exists("gone")

    def test_delete_missing(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            delete_profile("nope")

    @pytest.mark.parametrize("name", ["../escape", "", ".hidden", "a b"])
    def test_invalid_names(self, isolated_config: Path, name: str) -> None:
        with pytest.raises(ConfigError, match="Invalid profile name"):
            profile_exists(name)

    def test_list_ignores_non_json(self, isolated_config: Path) -> None:
        save_profile(_make_profile("real"))
        (get_profiles_dir() / "notes.txt").write_text("x", encoding="utf-8")
        assert list_profiles() == ["real"]


# ---------------------------------------------------------------------------
# Project config
# ---------------------------------------------------------------------------


class TestProjectConfig:
    def test_missing(self, isolated_config: Path) -> None:
        assert load_project_config() is None

    def test_valid(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "specreq.json", {"default_profile": "local"})
        assert load_project_config() == {"default_profile": "local"}

    def test_not_an_object(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "specreq.json", ["local"])
        with pytest.raises(ConfigError, match="expected a JSON object"):
            load_project_config()


# ---------------------------------------------------------------------------
# Precedence resolution
# ---------------------------------------------------------------------------


class TestResolveConfig:
    @pytest.fixture(autouse=True)
    def _isolate(self, isolated_config: Path) -> None:
        self.root = isolated_config

    def test_defaults_no_profile(self) -> None:
        config, profile = resolve_config()
        assert profile is None
        assert config.format is RequestFormat.CURL

    def test_global_default_profile(self) -> None:
        save_profile(_make_profile("one"))
        save_profile(_make_profile("two"))
        save_global_config(GlobalConfig(default_profile="two"))
        _, profile = resolve_config()
        assert profile is not None and profile.name == "two"

    def test_project_overrides_global(self) -> None:
        save_profile(_make_profile("global"))
        save_profile(_make_profile("local"))
        save_global_config(GlobalConfig(default_profile="global"))
        _write_json(self.root / "specreq.json", {"default_profile": "local"})
        _, profile = resolve_config()
        assert profile.name == "local"

    def test_env_overrides_project(self, monkeypatch: pytest.MonkeyPatch) -> None:
        save_profile(_make_profile("local"))
        save_profile(_make_profile("env"))
        _write_json(self.root / "specreq.json", {"default_profile": "local"})
        monkeypatch.setenv("SPECREQ_PROFILE", "env")
        _, profile = resolve_config()
        assert profile.name == "env"

    def test_cli_overrides_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        save_profile(_make_profile("env"))
        save_profile(_make_profile("cli"))
        monkeypatch.setenv("SPECREQ_PROFILE", "env")
        _, profile = resolve_config(cli_profile="cli")
        assert profile.name == "cli"

    def test_base_url_precedence(self, monkeypatch: pytest.MonkeyPatch) -> None:
        save_profile(Profile(name="p", spec="s.json", base_url="https://saved"))
        monkeypatch.setenv("SPECREQ_BASE_URL", "https://env")
        _, profile = resolve_config()
        assert profile.base_url == "https://env"
        _, profile = resolve_config(cli_base_url="https://cli")
        assert profile.base_url == "https://cli"

    def test_format_precedence(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_json(self.root / "specreq.json", {"format": "fetch"})
        assert resolve_config()[0].format is RequestFormat.FETCH
        monkeypatch.setenv("SPECREQ_FORMAT", "curl")
        assert resolve_config()[0].format is RequestFormat.CURL
        assert resolve_config(cli_format="fetch")[0].format is RequestFormat.FETCH

    def test_unknown_format(self) -> None:
        with pytest.raises(ConfigError, match="Unknown format 'wget': use curl or fetch"):
            resolve_config(cli_format="wget")

    def test_auto_select_single_profile(self) -> None:
        save_profile(_make_profile("only"))
        _, profile = resolve_config()
        assert profile.name == "only"

    def test_auto_select_disabled(self) -> None:
        save_profile(_make_profile("only"))
        save_global_config(GlobalConfig(auto_select_single_profile=False))
        assert resolve_config()[1] is None

    def test_auto_select_skipped_when_multiple(self) -> None:
        save_profile(_make_profile("a"))
        save_profile(_make_profile("b"))
        assert resolve_config()[1] is None

    def test_nonexistent_profile(self) -> None:
        with pytest.raises(ConfigError, match="Profile 'ghost' not found"):
            resolve_config(cli_profile="ghost")
