"""Command: generate identifiers."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from segseq.commands._base import SegCommand

if TYPE_CHECKING:
    from segseq.commands._context import AppContext


@click.command(
    "next",
    cls=SegCommand,
    examples="""\
  segseq next orders
  segseq next orders -n 100
  segseq --json next invoices --count 5""",
)
@click.argument("name")
@click.option(
    "-n",
    "--count",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="How many identifiers to generate.",
)
@click.pass_obj
def next_cmd(app: AppContext, name: str, count: int) -> None:
    """Generate identifiers from generator NAME."""
    app.emit(app.service().next_ids(name, count))
