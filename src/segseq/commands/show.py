"""Command: list generators and their stored counters."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from segseq.commands._base import SegCommand

if TYPE_CHECKING:
    from segseq.commands._context import AppContext


@click.command(
    cls=SegCommand,
    examples="""\
  segseq show
  segseq --json show""",
)
@click.pass_obj
def show(app: AppContext) -> None:
    """Show configured generators and the counters stored for them."""
    app.emit(app.service().show())
