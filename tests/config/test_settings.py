"""Tests for DerivaSettings source precedence."""

from __future__ import annotations

from pathlib import Path

import click
import pytest

from deriva.config.discovery import CONFIG_FILENAME
from deriva.config.settings import DerivaSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("DERIVA_CONFIG", "DERIVA_LAWS__MAX_EXAMPLES", "DERIVA_DERIVE__INSTALL"):
        monkeypatch.delenv(name, raising=False)


def _write_config(root: Path, body: str) -> Path:
    cfg = root / CONFIG_FILENAME
    cfg.write_text(body, encoding="utf-8")
    return cfg


class TestFromCli:
    def test_defaults_without_config(self, tmp_path: Path) -> None:
        settings = DerivaSettings.from_cli(project_root=tmp_path)
        assert settings.project_root == tmp_path
        assert settings.laws.max_examples == 50
        assert settings.derive.verify_laws is True
        assert settings.json_output is False

    def test_toml_overrides_defaults(self, tmp_path: Path) -> None:
        cfg = _write_config(tmp_path, "[laws]\nmax_examples = 12\nseed = 3\n")
        settings = DerivaSettings.from_cli(project_root=tmp_path)
        assert settings.config_path == cfg.resolve()
        assert settings.laws.max_examples == 12
        assert settings.laws.seed == 3

    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_config(tmp_path, "[laws]\nmax_examples = 12\n")
        monkeypatch.setenv("DERIVA_LAWS__MAX_EXAMPLES", "99")
        settings = DerivaSettings.from_cli(project_root=tmp_path)
        assert settings.laws.max_examples == 99

    def test_cli_flags_win(self, tmp_path: Path) -> None:
        settings = DerivaSettings.from_cli(project_root=tmp_path, json_output=True, verbose=True)
        assert settings.json_output is True
        assert settings.verbose is True

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        cfg = tmp_path / "custom.toml"
        cfg.write_text("[derive]\ninstall = false\n", encoding="utf-8")
        settings = DerivaSettings.from_cli(config_path=str(cfg))
        assert settings.config_path == cfg
        assert settings.project_root == tmp_path
        assert settings.derive.install is False

    def test_root_from_discovered_config(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_config(tmp_path, "")
        nested = tmp_path / "src"
        nested.mkdir()
        monkeypatch.chdir(nested)
        assert DerivaSettings.from_cli().project_root == tmp_path.resolve()

    def test_invalid_toml(self, tmp_path: Path) -> None:
        _write_config(tmp_path, "[laws\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            DerivaSettings.from_cli(project_root=tmp_path)


class TestLocalPluginDir:
    def test_resolved_against_root(self, tmp_path: Path) -> None:
        settings = DerivaSettings(project_root=tmp_path)
        assert settings.local_plugin_dir == tmp_path / ".deriva" / "plugins"

    def test_custom(self, tmp_path: Path) -> None:
        settings = DerivaSettings(project_root=tmp_path, plugins={"local_dir": "plugins"})
        assert settings.local_plugin_dir == tmp_path / "plugins"
