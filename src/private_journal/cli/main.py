"""private-journal CLI entry point."""

from __future__ import annotations

import importlib.metadata
from typing import Annotated

import typer

from private_journal.cli.add import add_cmd
from private_journal.cli.read import read_cmd
from private_journal.cli.recent import list_cmd
from private_journal.cli.remove import delete_cmd, reset_cmd
from private_journal.cli.search import search_cmd
from private_journal.cli.status import init_cmd, status_cmd
from private_journal.logging_config import configure_quiet_mode, enable_debug_mode


def _version() -> str:
    try:
        return importlib.metadata.version("private-journal")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"private-journal {_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="private-journal",
    help=(
        "Private journal — scoped notes with semantic search.\n\n"
        "  private-journal init    Create the global config and the index.\n"
        "  private-journal add     Record thoughts (project or user journal).\n"
        "  private-journal search  Find entries by meaning.\n"
        "  private-journal status  Provider, paths and entry counts."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Debug logging to stderr."),
    ] = False,
) -> None:
    """Private journal — scoped notes with semantic search."""
    if verbose:
        enable_debug_mode()
    else:
        configure_quiet_mode()


app.command("init")(init_cmd)
app.command("status")(status_cmd)
app.command("add")(add_cmd)
app.command("search")(search_cmd)
app.command("read")(read_cmd)
app.command("list")(list_cmd)
app.command("delete")(delete_cmd)
app.command("reset")(reset_cmd)


@app.command("version")
def version_cmd() -> None:
    """Show the installed private-journal version."""
    typer.echo(f"private-journal {_version()}")


if __name__ == "__main__":
    app()
