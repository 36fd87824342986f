"""Tests for the laws CLI command."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from deriva.cli import cli

WIDGET = """
[[types]]
name = "Wrap"
  [[types.constructors]]
  name = "mk"
  fields = ["Widget a"]
"""


@pytest.mark.usefixtures("_isolated_project")
class TestLawsCommand:
    def test_table_output(self, cli_runner: CliRunner, types_file: Path) -> None:
        result = cli_runner.invoke(cli, ["laws", str(types_file), "Pair"])
        assert result.exit_code == 0, result.output
        assert result.stdout.startswith("OK  laws")
        assert "traverse_composition" in result.stdout
        assert "Compose(Option, Writer)" in result.stdout
        assert "max_examples: 10" in result.stdout

    def test_json_obligations(self, cli_runner: CliRunner, types_file: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "laws", str(types_file), "Rose"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["op"] == "laws"
        (entry,) = data["data"]["types"]
        assert len(entry["laws"]["obligations"]) == 16
        assert {o["constructor"] for o in entry["laws"]["obligations"]} == {"leaf", "node"}

    def test_env_overrides_examples(
        self, cli_runner: CliRunner, types_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("DERIVA_LAWS__MAX_EXAMPLES", "3")
        result = cli_runner.invoke(cli, ["--json", "laws", str(types_file), "Pair"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"]["types"][0]["laws"]["max_examples"] == 3

    def test_missing_capability(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "wrap.toml"
        path.write_text(WIDGET, encoding="utf-8")
        result = cli_runner.invoke(cli, ["--json", "laws", str(path)])
        assert result.exit_code == 1
        assert json.loads(result.stderr)["error"]["code"] == "MISSING_CAPABILITY"
