"""AppContext — shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. Builds the Workspace lazily and routes results to
stdout (success) or stderr with exit code 1 (failure).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from obzctl.config.logging import configure_logging
from obzctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from obzctl.config.settings import ObzSettings
    from obzctl.infrastructure.workspace import Workspace
    from obzctl.services.result import ServiceResult


class AppContext:
    """Settings plus a lazily created :class:`Workspace`.

    ``--help`` and ``--examples`` never open storage.
    """

    def __init__(self, settings: ObzSettings) -> None:
        self.settings = settings
        self._workspace: Workspace | None = None
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def workspace(self) -> Workspace:
        if self._workspace is None:
            from obzctl.infrastructure.workspace import Workspace

            self._workspace = Workspace(self.settings)
        return self._workspace

    def close(self) -> None:
        if self._workspace is not None:
            self._workspace.close()
            self._workspace = None

    def emit(self, result: ServiceResult) -> None:
        """Print *result*; exit 1 when it failed.

        Warnings go to stderr in human modes; in JSON mode they are part of
        the payload already.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
            return
        click.echo(output, err=True)
        raise SystemExit(1)
