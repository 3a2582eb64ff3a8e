"""Semantic search and listing across the project and user scopes.

search():
  1. Embed the query once; the same vector is reused for every scope.
  2. Query each requested scope (project first) for ``limit * overfetch``
     candidates, with the date range pushed down as a native timestamp filter.
  3. Merge, then apply the section filter (case-insensitive substring).
  4. score = 1 - cosine distance; stable sort descending; truncate to limit.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from private_journal.db.index import ScopedVectorIndex
from private_journal.db.models import (
    SCOPES,
    DateRange,
    IndexedEntry,
    SearchResult,
    TimestampRange,
)

logger = logging.getLogger(__name__)

SCOPE_CHOICES = ("project", "user", "both")


class SearchService:
    """Single entry point for semantic retrieval and recent-entry listing.

    Args:
        index: Shared vector index.
        project_root: Root directory of the project-scoped journal.
        user_root: Root directory of the user-scoped journal.
        overfetch: Per-scope candidate multiplier applied to ``limit`` before
            merging and post-filtering.
    """

    def __init__(
        self,
        index: ScopedVectorIndex,
        project_root: Path,
        user_root: Path,
        *,
        overfetch: int = 1,
    ) -> None:
        if overfetch < 1:
            raise ValueError(f"overfetch must be >= 1, got {overfetch}")
        self._index = index
        self._roots = (Path(project_root), Path(user_root))
        self._overfetch = overfetch

    async def search(
        self,
        query: str,
        *,
        limit: int = 10,
        scope: str = "both",
        sections: Sequence[str] | None = None,
        date_range: DateRange | None = None,
    ) -> list[SearchResult]:
        """Return up to *limit* entries most similar to *query*, best first."""
        scopes = _scopes_for(scope)
        _check_limit(limit)

        query_vector = await self._index.embed(query)
        raw_filter = _raw_filter(date_range)

        candidates: list[IndexedEntry] = []
        for s in scopes:
            candidates.extend(
                await self._index.query(s, query_vector, limit * self._overfetch, raw_filter)
            )

        results = [
            SearchResult(id=c.id, metadata=c.metadata, score=1 - (c.distance or 0.0))
            for c in _filter_sections(candidates, sections)
        ]
        results.sort(key=lambda r: r.score, reverse=True)
        logger.debug("search %r: %d candidates, %d kept", query, len(candidates), len(results))
        return results[:limit]

    async def list_recent(
        self,
        *,
        limit: int = 10,
        scope: str = "both",
        date_range: DateRange | None = None,
    ) -> list[IndexedEntry]:
        """Return up to *limit* entries, newest first."""
        scopes = _scopes_for(scope)
        _check_limit(limit)
        raw_filter = _raw_filter(date_range)

        entries: list[IndexedEntry] = []
        for s in scopes:
            entries.extend(await self._index.list(s, raw_filter, limit))

        entries.sort(key=lambda e: e.metadata.timestamp, reverse=True)
        return entries[:limit]

    async def read_entry(self, path: str) -> str | None:
        """Return the text of the entry stored at *path*, or None if there is none.

        Relative paths are tried against the project root, then the user root.
        Paths that resolve outside both roots are treated as not found.
        """
        return await asyncio.to_thread(self._read_entry, path)

    def _read_entry(self, path: str) -> str | None:
        candidate = Path(path).expanduser()
        if candidate.is_absolute():
            options = [candidate]
        else:
            options = [root / candidate for root in self._roots]

        roots = [root.resolve() for root in self._roots]
        for option in options:
            resolved = option.resolve()
            if not any(resolved.is_relative_to(root) for root in roots):
                continue
            if resolved.is_file():
                # newline="" mirrors the writer: \r\n and lone \r come back untouched.
                with resolved.open(encoding="utf-8", newline="") as fh:
                    return fh.read()
        return None


def _filter_sections(
    entries: list[IndexedEntry], sections: Sequence[str] | None
) -> list[IndexedEntry]:
    """Keep entries with a section containing any requested value (case-insensitive)."""
    if not sections:
        return entries
    wanted = [s.lower() for s in sections]
    return [
        e
        for e in entries
        if any(w in tag.lower() for w in wanted for tag in e.metadata.sections)
    ]


def _scopes_for(scope: str) -> tuple[str, ...]:
    if scope not in SCOPE_CHOICES:
        raise ValueError(f"Unknown scope '{scope}' — expected one of {', '.join(SCOPE_CHOICES)}.")
    return SCOPES if scope == "both" else (scope,)


def _check_limit(limit: int) -> None:
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")


def _raw_filter(date_range: DateRange | None) -> TimestampRange | None:
    if date_range is None:
        return None
    raw = date_range.to_timestamp_range()
    return None if raw.is_empty() else raw
