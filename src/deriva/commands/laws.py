"""Command: derive and verify functor/traversable laws."""

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
  deriva laws types.toml
  deriva laws types.toml Pair
  DERIVA_LAWS__MAX_EXAMPLES=500 deriva laws types.toml""",
)
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("types", nargs=-1)
@click.pass_obj
def laws(app: AppContext, file: Path, types: tuple[str, ...]) -> None:
    """Derive TYPES from FILE and check their laws per constructor."""
    svc = app.service_for(file)
    app.emit(svc.verify(list(types) or None))
