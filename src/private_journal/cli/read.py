"""private-journal read — print one entry by path."""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer

from private_journal.cli.errors import err_entry_not_found
from private_journal.cli.runtime import console, load_or_exit, with_journal


def read_cmd(
    path: Annotated[
        str,
        typer.Argument(help="Entry path, absolute or relative to a journal root."),
    ],
) -> None:
    """Read a specific journal entry."""
    config = load_or_exit()
    content = asyncio.run(with_journal(config, lambda j: j.read_entry(path)))

    if content is None:
        console.print(err_entry_not_found(path))
        raise typer.Exit(1)

    typer.echo(content)
