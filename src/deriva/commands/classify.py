"""Command: show how each field relates to the designated variable."""

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
  deriva classify types.toml Pair
  deriva --json classify types.toml Rose""",
)
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("type_name", metavar="TYPE")
@click.pass_obj
def classify(app: AppContext, file: Path, type_name: str) -> None:
    """Classify every field of TYPE declared in FILE."""
    svc = app.service_for(file)
    app.emit(svc.classify(type_name))
