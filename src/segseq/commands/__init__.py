"""Subcommand modules for segseq.

Provides register_commands() which uses deferred imports to keep
``segseq --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from segseq.commands.init_cmd import init_cmd
    from segseq.commands.next_cmd import next_cmd
    from segseq.commands.show import show

    cli.add_command(init_cmd)
    cli.add_command(next_cmd)
    cli.add_command(show)
