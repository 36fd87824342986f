"""Command: synthesize map/traverse and print the generated operations."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from deriva.commands._base import DerivaCommand

if TYPE_CHECKING:
    from deriva.commands._context import AppContext


@click.command(
    cls=DerivaCommand,
    examples="""\
  deriva derive types.toml
  deriva derive types.toml Pair Box
  deriva derive types.toml Tree --no-laws
  deriva --json derive types.toml""",
)
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("types", nargs=-1)
@click.option(
    "--laws/--no-laws",
    "verify",
    default=None,
    help="Verify functor/traversable laws (default: [derive] verify_laws).",
)
@click.pass_obj
def derive(app: AppContext, file: Path, types: tuple[str, ...], verify: bool | None) -> None:
    """Derive map and traverse for TYPES declared in FILE (default: all)."""
    svc = app.service_for(file)
    app.emit(svc.derive(list(types) or None, verify=verify))
