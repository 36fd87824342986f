"""Help output for every CLI command."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from deriva.cli import cli

HELP_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["--help"], ["derive", "laws", "classify", "--json", "--config"]),
    (["derive", "--help"], ["FILE", "TYPES", "--laws / --no-laws"]),
    (["laws", "--help"], ["FILE", "TYPES"]),
    (["classify", "--help"], ["FILE", "TYPE"]),
]


@pytest.mark.parametrize(
    "args,expected_keywords",
    HELP_COMMANDS,
    ids=["_".join(a for a in args if a != "--help") or "root" for args, _ in HELP_COMMANDS],
)
def test_help(cli_runner: CliRunner, args: list[str], expected_keywords: list[str]) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0
    for kw in expected_keywords:
        assert kw in result.output
