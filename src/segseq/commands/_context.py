"""AppContext: shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. The engine and registry are built lazily so
``--help`` and ``--version`` never touch configuration errors or the
database.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from segseq.errors import SegseqError
from segseq.output.formatters import format_result

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from segseq.config.settings import SegseqSettings
    from segseq.services.registry import GeneratorRegistry
    from segseq.services.result import ServiceResult
    from segseq.services.sequences import SequenceService


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: SegseqSettings) -> None:
        self.settings = settings
        self._engine: Engine | None = None
        self._registry: GeneratorRegistry | None = None

        from segseq.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            from segseq.infrastructure.database.engine import create_db_engine

            db = self.settings.database
            self._engine = create_db_engine(db.url, busy_timeout=db.busy_timeout, echo=db.echo)
        return self._engine

    @property
    def registry(self) -> GeneratorRegistry:
        if self._registry is None:
            from segseq.services.registry import GeneratorRegistry

            self._registry = GeneratorRegistry.from_settings(self.settings)
        return self._registry

    def service(self) -> SequenceService:
        """Build the sequence service, exiting with an error on bad configuration."""
        from segseq.services.result import ServiceResult
        from segseq.services.sequences import SequenceService

        try:
            return SequenceService(self.registry, self.engine)
        except SegseqError as exc:
            self.emit(ServiceResult.failure("configure", exc))
            raise  # unreachable: emit exits

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout; warnings go to stderr in human mode.
        * Failure: writes to stderr, exits with code 1.
        """
        output = format_result(result, json_output=self.settings.json_output)
        if result.ok:
            click.echo(output)
            if not self.settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(result.exit_code)

    def close(self) -> None:
        if self._registry is not None:
            self._registry.clear()
        if self._engine is not None:
            self._engine.dispose()
