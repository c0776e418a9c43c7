"""Command: show where a module source would be fetched from."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tfwrap.commands._base import TfwCommand

if TYPE_CHECKING:
    from tfwrap.commands._context import AppContext


@click.command(
    cls=TfwCommand,
    examples="""\
  tfwrap resolve terraform-aws-modules/vpc/aws
  tfwrap resolve github.com/org/repo//modules/db
  tfwrap --json resolve git::ssh://git@example.com/infra.git""",
)
@click.argument("source")
@click.pass_obj
def resolve(app: AppContext, source: str) -> None:
    """Resolve SOURCE to a fetch location without downloading it."""
    app.emit(app.wrapper_service().resolve_source(source))
