"""End-to-end workflows through the CLI: plugins, config, nesting chains."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from deriva.cli import cli

IDENT_PLUGIN = """\
import pluggy
from hypothesis import strategies as st

from deriva.domain.capability import Capability

hookimpl = pluggy.HookimplMarker("deriva")


def _map(fn, value):
    return ("ident", fn(value[1]))


def _traverse(app, fn, value):
    return app.fmap(lambda y: ("ident", y), fn(value[1]))


def _arbitrary(elements):
    return elements.map(lambda v: ("ident", v))


class IdentPlugin:
    @hookimpl
    def register_capabilities(self):
        return [Capability("Ident", _map, _traverse, _arbitrary, lawful=True)]
"""

CHAIN = """
[[types]]
name = "Outer"
  [[types.constructors]]
  name = "mk"
  fields = ["Ident (Inner a)", { name = "size", type = "Nat" }]

[[types]]
name = "Inner"
  [[types.constructors]]
  name = "none"
  [[types.constructors]]
  name = "some"
  fields = ["a", "List a"]
"""


@pytest.fixture
def plugin_project(tmp_path: Path, _isolated_project: None) -> Path:
    plugins = tmp_path / ".deriva" / "plugins"
    plugins.mkdir(parents=True)
    (plugins / "ident.py").write_text(IDENT_PLUGIN, encoding="utf-8")
    (tmp_path / "deriva.toml").write_text("[laws]\nmax_examples = 10\n", encoding="utf-8")
    types = tmp_path / "chain.toml"
    types.write_text(CHAIN, encoding="utf-8")
    return types


@pytest.mark.usefixtures("_isolated_project")
class TestWorkflows:
    def test_local_plugin_container_with_dependency_order(
        self, cli_runner: CliRunner, plugin_project: Path
    ) -> None:
        result = cli_runner.invoke(cli, ["--json", "derive", str(plugin_project), "Outer"])
        assert result.exit_code == 0, result.output
        types = json.loads(result.stdout)["data"]["types"]
        assert [t["name"] for t in types] == ["Inner", "Outer"]
        assert types[1]["nested"] == ["Ident", "Inner"]
        assert all(t["lawful"] for t in types)

    def test_plugins_disabled_by_config(
        self, cli_runner: CliRunner, plugin_project: Path, tmp_path: Path
    ) -> None:
        (tmp_path / "deriva.toml").write_text(
            "[plugins]\ndiscover = false\n", encoding="utf-8"
        )
        result = cli_runner.invoke(cli, ["--json", "derive", str(plugin_project), "Outer"])
        assert result.exit_code == 1
        assert json.loads(result.stderr)["error"]["code"] == "MISSING_CAPABILITY"

    def test_explicit_config_flag(
        self, cli_runner: CliRunner, types_file: Path, tmp_path: Path
    ) -> None:
        custom = tmp_path / "custom.toml"
        custom.write_text("[laws]\nmax_examples = 4\n", encoding="utf-8")
        result = cli_runner.invoke(
            cli, ["--json", "-c", str(custom), "laws", str(types_file), "Pair"]
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"]["types"][0]["laws"]["max_examples"] == 4
