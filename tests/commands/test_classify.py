"""Tests for the classify CLI command."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from deriva.cli import cli


@pytest.mark.usefixtures("_isolated_project")
class TestClassifyCommand:
    def test_table(self, cli_runner: CliRunner, types_file: Path) -> None:
        result = cli_runner.invoke(cli, ["classify", str(types_file), "Rose"])
        assert result.exit_code == 0, result.output
        assert "Rose (over a)" in result.stdout
        assert "kids" in result.stdout
        assert "nested in List" in result.stdout

    def test_json(self, cli_runner: CliRunner, types_file: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "classify", str(types_file), "Box"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data["type"] == "Box"
        kinds = [f["kind"] for f in data["constructors"][0]["fields"]]
        assert kinds == ["exact", "absent"]

    def test_unknown_type(self, cli_runner: CliRunner, types_file: Path) -> None:
        result = cli_runner.invoke(cli, ["classify", str(types_file), "Nope"])
        assert result.exit_code == 1
        assert "[UNKNOWN_TYPE]" in result.stderr

    def test_requires_type(self, cli_runner: CliRunner, types_file: Path) -> None:
        result = cli_runner.invoke(cli, ["classify", str(types_file)])
        assert result.exit_code == 2
        assert "TYPE" in result.output
