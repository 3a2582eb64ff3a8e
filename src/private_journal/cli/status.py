"""private-journal init / status.

  init     create ~/.private-journal/config.yaml (mode 0600), both journal
           roots, and the index collections
  status   provider, paths and indexed entry counts
"""

from __future__ import annotations

import asyncio

import typer
from rich.panel import Panel

from private_journal.cli.errors import err_write_failed
from private_journal.cli.runtime import console, exit_on_index_error, load_or_exit, with_journal
from private_journal.config import ensure_global_config
from private_journal.exceptions import IndexUnavailable
from private_journal.journal import Journal


def init_cmd() -> None:
    """Create the global config, both journal roots, and the search index."""
    try:
        cfg_path = ensure_global_config()
    except OSError as exc:
        console.print(err_write_failed(str(exc)))
        raise typer.Exit(1)
    console.print(f"  [green]✓[/] {cfg_path} (global config)")

    config = load_or_exit()

    async def _init(journal: Journal) -> Journal:
        for root in (journal.project_root, journal.user_root):
            await asyncio.to_thread(root.mkdir, parents=True, exist_ok=True)
        await journal.index.initialize()
        return journal

    try:
        journal = asyncio.run(with_journal(config, _init))
    except OSError as exc:
        console.print(err_write_failed(str(exc)))
        raise typer.Exit(1)
    except IndexUnavailable as exc:
        exit_on_index_error(exc)

    console.print(f"  [green]✓[/] {journal.project_root} (project journal)")
    console.print(f"  [green]✓[/] {journal.user_root} (user journal)")
    console.print(f"  [green]✓[/] {journal.index_path} (index, {journal.gateway.model})")


def status_cmd() -> None:
    """Show the embedding provider, journal locations and entry counts."""
    config = load_or_exit()

    try:
        lines = asyncio.run(with_journal(config, _status_lines))
    except IndexUnavailable as exc:
        exit_on_index_error(exc)

    console.print(Panel("\n".join(lines), title="[bold]Journal[/]", expand=False))


async def _status_lines(journal: Journal) -> list[str]:
    gateway = journal.gateway
    provider = f"Provider:  [bold]{gateway.provider}[/]"
    if gateway.provider != gateway.configured_provider:
        provider += f" [yellow](configured: {gateway.configured_provider})[/]"

    lines = [
        provider,
        f"Model:     {gateway.model}",
        f"Project:   {journal.project_root}",
        f"User:      {journal.user_root}",
        f"Index:     {journal.index_path}",
    ]

    # Counting would create the index file; leave that to init/add.
    if not journal.index_path.exists():
        lines.append("[yellow]No index yet.[/]  Run:  private-journal init")
        return lines

    counts = await journal.entry_counts()
    lines.append(
        f"Entries:   project [bold]{counts['project']}[/]  |  user [bold]{counts['user']}[/]"
    )
    return lines
