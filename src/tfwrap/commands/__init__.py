"""Subcommand modules for tfwrap.

Provides register_commands() which uses deferred imports to keep
``tfwrap --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from tfwrap.commands.generate import generate
    from tfwrap.commands.resolve import resolve
    from tfwrap.commands.variables import variables

    cli.add_command(generate)
    cli.add_command(variables)
    cli.add_command(resolve)
