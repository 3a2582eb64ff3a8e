"""Shared CLI plumbing: config loading, journal lifecycle, JSON output."""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from typing import Any, NoReturn, TypeVar

import typer
from rich.console import Console

from private_journal.cli.errors import (
    err_config,
    err_dimension_mismatch,
    err_index_unavailable,
)
from private_journal.config import ConfigError, JournalConfig, load_config
from private_journal.db.models import DateRange
from private_journal.exceptions import EmbeddingDimensionMismatch, IndexUnavailable
from private_journal.journal import Journal

console = Console()

T = TypeVar("T")


def load_or_exit() -> JournalConfig:
    try:
        return load_config()
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1)


async def with_journal(config: JournalConfig, fn: Callable[[Journal], Awaitable[T]]) -> T:
    """Open a Journal, run *fn*, and always close the index."""
    async with Journal(config) as journal:
        return await fn(journal)


def exit_on_index_error(exc: Exception) -> NoReturn:
    """Print the message for an index-layer failure and exit 1."""
    if isinstance(exc, EmbeddingDimensionMismatch):
        console.print(err_dimension_mismatch(str(exc)))
    elif isinstance(exc, IndexUnavailable):
        console.print(err_index_unavailable(str(exc)))
    else:
        raise exc
    raise typer.Exit(1)


def days_back(days: int | None) -> DateRange | None:
    if days is None:
        return None
    return DateRange(start=datetime.now() - timedelta(days=days))


def echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))
