"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from typing import Annotated

import typer

from kernrepo import __version__
from kernrepo.cli.commands import init, status, sync
from kernrepo.utils.formatting import setup_logging

# Create main Typer app
app = typer.Typer(
    name="kernrepo",
    help="Keep a local pacman repository of kernel packages in sync.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"kernrepo version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
) -> None:
    """kernrepo - mirror kernel packages into a local repository.

    Keeps exactly one version of every configured kernel family on disk
    and in the repository database.
    """
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


# Register commands
app.add_typer(init.app, name="init")
app.add_typer(sync.app, name="sync")
app.add_typer(status.app, name="status")


if __name__ == "__main__":
    app()
