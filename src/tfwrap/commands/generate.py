"""Command: generate a wrapper module."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from tfwrap.commands._base import TfwCommand

if TYPE_CHECKING:
    from tfwrap.commands._context import AppContext


@click.command(
    cls=TfwCommand,
    examples="""\
  tfwrap generate terraform-aws-modules/vpc/aws
  tfwrap generate terraform-aws-modules/vpc/aws --version v5.8.1 --name mynet
  tfwrap generate terraform-aws-modules/s3-bucket/aws --iterable --collection buckets
  tfwrap generate git::https://github.com/org/infra.git//modules/db --output-dir wrappers
  tfwrap --json generate ./modules/network --no-format""",
)
@click.argument("source")
@click.option(
    "--version",
    "--ref",
    "version",
    default=None,
    help="Tag or branch to fetch (default: the repository's default branch).",
)
@click.option("--name", default=None, help="Wrapper directory name (default: last source segment).")
@click.option(
    "--iterable",
    is_flag=True,
    help="Instantiate the module once per entry of a config sub-collection.",
)
@click.option(
    "--collection",
    "collection_key",
    default=None,
    help="Config key holding the instances for --iterable (default from config).",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Parent directory for the wrapper (default: current directory).",
)
@click.option("--no-format", is_flag=True, help="Skip the external HCL formatter.")
@click.pass_obj
def generate(
    app: AppContext,
    source: str,
    version: str | None,
    name: str | None,
    iterable: bool,
    collection_key: str | None,
    output_dir: Path | None,
    no_format: bool,
) -> None:
    """Generate a JSON-configured wrapper module around SOURCE."""
    app.emit(
        app.wrapper_service().generate(
            source,
            version=version,
            name=name,
            iterable=iterable,
            collection_key=collection_key,
            output_dir=output_dir,
            format_output=not no_format,
        )
    )
