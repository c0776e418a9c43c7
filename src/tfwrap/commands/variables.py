"""Command: list a module's input variables."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tfwrap.commands._base import TfwCommand

if TYPE_CHECKING:
    from tfwrap.commands._context import AppContext


@click.command(
    cls=TfwCommand,
    examples="""\
  tfwrap variables terraform-aws-modules/vpc/aws
  tfwrap variables terraform-aws-modules/vpc/aws --version v5.8.1
  tfwrap -q variables ./modules/network
  tfwrap -v variables github.com/org/repo//modules/db""",
)
@click.argument("source")
@click.option("--version", "--ref", "version", default=None, help="Tag or branch to fetch.")
@click.pass_obj
def variables(app: AppContext, source: str, version: str | None) -> None:
    """List the input variables of SOURCE in declaration order."""
    app.emit(app.wrapper_service().list_variables(source, version=version))
