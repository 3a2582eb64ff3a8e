"""private-journal search — semantic search across the journals.

Results are printed as JSON, best match first:
  [{"text": ..., "sections": [...], "timestamp": ..., "path": ..., "type": ...,
    "score": 0.83, "id": ...}, ...]
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Annotated

import typer

from private_journal.cli.runtime import (
    days_back,
    echo_json,
    exit_on_index_error,
    load_or_exit,
    with_journal,
)
from private_journal.exceptions import EmbeddingDimensionMismatch, IndexUnavailable


class ScopeChoice(str, Enum):
    project = "project"
    user = "user"
    both = "both"


def search_cmd(
    query: Annotated[str, typer.Argument(help="Natural language search query.")],
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-n", min=1, help="Maximum number of results to return."),
    ] = None,
    scope: Annotated[
        ScopeChoice,
        typer.Option("--type", "-t", help="Search scope."),
    ] = ScopeChoice.both,
    section: Annotated[
        list[str] | None,
        typer.Option("--section", "-s", help="Filter by section type (repeatable)."),
    ] = None,
    days: Annotated[
        int | None,
        typer.Option("--days", min=0, help="Only search entries from the last N days."),
    ] = None,
) -> None:
    """Search your journal."""
    config = load_or_exit()
    top = limit if limit is not None else config.search.limit

    try:
        results = asyncio.run(
            with_journal(
                config,
                lambda j: j.search(
                    query,
                    limit=top,
                    scope=scope.value,
                    sections=section or None,
                    date_range=days_back(days),
                ),
            )
        )
    except (IndexUnavailable, EmbeddingDimensionMismatch) as exc:
        exit_on_index_error(exc)

    echo_json([r.to_dict() for r in results])
