"""Subcommand modules for tasknav.

Provides register_commands() which uses deferred imports to keep
``tasknav --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the standalone commands on the root CLI group."""
    from tasknav.commands.goto import goto
    from tasknav.commands.locate import locate

    cli.add_command(locate)
    cli.add_command(goto)
