"""AppContext: shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``.  Provides lazy Workspace initialization and
centralized result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from deriva.config.logging import configure_logging
from deriva.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from pathlib import Path

    from deriva.config.settings import DerivaSettings
    from deriva.infrastructure.workspace import Workspace
    from deriva.services.derive import DeriveService
    from deriva.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The workspace is created on first use so ``--help`` and ``--version``
    never load plugins.
    """

    def __init__(self, settings: DerivaSettings) -> None:
        self.settings = settings
        self._workspace: Workspace | None = None

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from deriva.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def workspace(self) -> Workspace:
        """The workspace (created lazily, with plugins installed)."""
        if self._workspace is None:
            from deriva.infrastructure.workspace import Workspace

            self._workspace = Workspace(self.settings)
            self._workspace.init_plugins()
        return self._workspace

    def service_for(self, path: Path) -> DeriveService:
        """A DeriveService over the declarations in *path*.

        Emits the load failure and exits when the file cannot be loaded.
        """
        from deriva.services.derive import DeriveService

        svc = DeriveService(self.workspace)
        loaded = svc.load(path)
        if not loaded.ok:
            self.emit(loaded)
        return svc

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout.  Warnings go to stderr so they do not
          pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
