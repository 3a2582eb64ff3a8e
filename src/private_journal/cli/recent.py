"""private-journal list — recent entries, newest first (JSON)."""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer

from private_journal.cli.runtime import (
    days_back,
    echo_json,
    exit_on_index_error,
    load_or_exit,
    with_journal,
)
from private_journal.cli.search import ScopeChoice
from private_journal.exceptions import IndexUnavailable


def list_cmd(
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-n", min=1, help="Maximum number of entries to return."),
    ] = None,
    scope: Annotated[
        ScopeChoice,
        typer.Option("--type", "-t", help="List scope."),
    ] = ScopeChoice.both,
    days: Annotated[
        int | None,
        typer.Option("--days", min=0, help="Number of days back to list (default from config)."),
    ] = None,
) -> None:
    """List recent journal entries."""
    config = load_or_exit()
    top = limit if limit is not None else config.search.limit
    window = days if days is not None else config.search.days

    try:
        entries = asyncio.run(
            with_journal(
                config,
                lambda j: j.list_recent(limit=top, scope=scope.value, date_range=days_back(window)),
            )
        )
    except IndexUnavailable as exc:
        exit_on_index_error(exc)

    echo_json([e.to_dict() for e in entries])
