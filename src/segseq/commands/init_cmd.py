"""Command: create segment tables and seed rows."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from segseq.commands._base import SegCommand

if TYPE_CHECKING:
    from segseq.commands._context import AppContext


@click.command(
    "init",
    cls=SegCommand,
    examples="""\
  segseq init
  segseq --json init
  segseq -c ./config/segseq.toml init""",
)
@click.pass_obj
def init_cmd(app: AppContext) -> None:
    """Create the segment tables of all configured generators."""
    app.emit(app.service().init_schema())
