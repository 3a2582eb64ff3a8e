"""private-journal delete / reset — index maintenance.

  delete ID --type project|user   remove one entry from the index
  reset [--yes]                   drop and recreate both collections empty

Markdown files on disk are never touched.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Annotated

import typer

from private_journal.cli.errors import err_unknown_entry_id
from private_journal.cli.runtime import console, exit_on_index_error, load_or_exit, with_journal
from private_journal.exceptions import EntryNotFound, IndexUnavailable


class EntryScope(str, Enum):
    project = "project"
    user = "user"


def delete_cmd(
    entry_id: Annotated[str, typer.Argument(help="Entry id, as shown by list/search.")],
    scope: Annotated[
        EntryScope,
        typer.Option("--type", "-t", help="Scope holding the entry."),
    ] = EntryScope.project,
) -> None:
    """Remove an entry from the search index."""
    config = load_or_exit()
    try:
        asyncio.run(with_journal(config, lambda j: j.delete_entry(entry_id, scope.value)))
    except EntryNotFound:
        console.print(err_unknown_entry_id(entry_id, scope.value))
        raise typer.Exit(1)
    except IndexUnavailable as exc:
        exit_on_index_error(exc)

    console.print(f"[green]✓[/] Removed from index: {entry_id}")


def reset_cmd(
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Empty both search collections. Journal files are kept."""
    if not yes:
        if not typer.confirm("Drop every indexed entry in both scopes?", default=False):
            console.print("[dim]Cancelled.[/]")
            raise typer.Exit(0)

    config = load_or_exit()
    try:
        asyncio.run(with_journal(config, lambda j: j.reset()))
    except IndexUnavailable as exc:
        exit_on_index_error(exc)

    console.print("[green]✓[/] Index reset. Journal files on disk are unchanged.")
