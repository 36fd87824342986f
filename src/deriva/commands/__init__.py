"""Subcommand modules for deriva.

Provides register_commands() which uses deferred imports to keep
``deriva --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the standalone commands on the root CLI group."""
    from deriva.commands.classify import classify
    from deriva.commands.derive import derive
    from deriva.commands.laws import laws

    cli.add_command(derive)
    cli.add_command(laws)
    cli.add_command(classify)
