"""private-journal add — record categorized thoughts.

  --project-notes              → project journal (./.private-journal)
  --feelings, --user-context,
  --technical-insights,
  --world-knowledge            → user journal (~/.private-journal)

One file per category; each is indexed for semantic search.
"""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer

from private_journal.cli.errors import err_no_thoughts, err_write_failed, warn_not_indexed
from private_journal.cli.runtime import console, exit_on_index_error, load_or_exit, with_journal
from private_journal.exceptions import (
    EmbeddingDimensionMismatch,
    IndexUnavailable,
    NoContentProvided,
)


def add_cmd(
    feelings: Annotated[
        str | None,
        typer.Option("--feelings", help="Private feelings about the work."),
    ] = None,
    project_notes: Annotated[
        str | None,
        typer.Option("--project-notes", help="Technical notes about the current project."),
    ] = None,
    user_context: Annotated[
        str | None,
        typer.Option("--user-context", help="Notes about your human collaborator."),
    ] = None,
    technical_insights: Annotated[
        str | None,
        typer.Option("--technical-insights", help="General software engineering insights."),
    ] = None,
    world_knowledge: Annotated[
        str | None,
        typer.Option("--world-knowledge", help="Interesting discoveries about the world."),
    ] = None,
) -> None:
    """Add a new journal entry."""
    thoughts = {
        "feelings": feelings,
        "project_notes": project_notes,
        "user_context": user_context,
        "technical_insights": technical_insights,
        "world_knowledge": world_knowledge,
    }
    if all(v is None for v in thoughts.values()):
        console.print(err_no_thoughts())
        raise typer.Exit(1)

    config = load_or_exit()
    try:
        entries = asyncio.run(with_journal(config, lambda j: j.write_thoughts(thoughts)))
    except NoContentProvided:
        console.print(err_no_thoughts())
        raise typer.Exit(1)
    except OSError as exc:
        console.print(err_write_failed(str(exc)))
        raise typer.Exit(1)
    except (IndexUnavailable, EmbeddingDimensionMismatch) as exc:
        console.print(warn_not_indexed())
        exit_on_index_error(exc)

    console.print("[green]✓[/] Thoughts recorded successfully.")
    for entry in entries:
        console.print(f"  [dim]{entry.scope}:[/] {entry.storage_path}")
