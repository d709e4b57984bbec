"""docimport CLI - docimport command."""

import click

from docimport import __version__
from docimport.cli.init import init_command
from docimport.cli.run import run_command
from docimport.cli.status import status_command
from docimport.core.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="docimport")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """docimport - Import parsed source documentation into a content store."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "INFO")


cli.add_command(init_command, name="init")
cli.add_command(run_command, name="run")
cli.add_command(status_command, name="status")


if __name__ == "__main__":
    cli()
