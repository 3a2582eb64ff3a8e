"""Entry store — date-partitioned markdown files plus indexing.

Layout: ``<scope root>/<YYYY-MM-DD>/<HH-MM-SS>-<microseconds>-<rand>.md``.

Each write runs in order: ensure the day bucket, create the file (exclusive
create, never overwrite), then index. If indexing fails the file is kept and
the error propagates; the entry is durable but not searchable until re-indexed.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from pathlib import Path

from private_journal.db.index import ScopedVectorIndex
from private_journal.db.models import SCOPES, EntryMetadata, JournalEntry, Scope
from private_journal.exceptions import NoContentProvided

logger = logging.getLogger(__name__)

# Category → (scope, heading). Static: project notes stay with the project,
# everything about the user and the world is global.
THOUGHT_CATEGORIES: dict[str, tuple[Scope, str]] = {
    "feelings": ("user", "Feelings"),
    "project_notes": ("project", "Project Notes"),
    "user_context": ("user", "User Context"),
    "technical_insights": ("user", "Technical Insights"),
    "world_knowledge": ("user", "World Knowledge"),
}


class EntryStore:
    """Write journal entries to disk and hand them to the index.

    Args:
        project_root: Root directory of the project-scoped journal.
        user_root: Root directory of the user-scoped journal.
        index: Vector index receiving every written entry.
        clock: Returns the current local time; injectable for tests.
    """

    def __init__(
        self,
        project_root: Path,
        user_root: Path,
        index: ScopedVectorIndex,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._roots: dict[str, Path] = {"project": Path(project_root), "user": Path(user_root)}
        self._index = index
        self._clock = clock or datetime.now

    def root(self, scope: str) -> Path:
        try:
            return self._roots[scope]
        except KeyError:
            raise ValueError(f"Unknown scope '{scope}' — expected one of {SCOPES}.") from None

    async def write_entry(
        self, scope: Scope, text: str, sections: Sequence[str] = ()
    ) -> JournalEntry:
        """Persist *text* as a new entry in *scope* and index it.

        Returns:
            The created JournalEntry.

        Raises:
            OSError: If the file cannot be written (nothing is indexed).
            IndexUnavailable: If indexing fails (the file is kept).
        """
        root = self.root(scope)
        now = self._clock()
        day = now.strftime("%Y-%m-%d")
        stem = f"{now.strftime('%H-%M-%S')}-{now.microsecond:06d}-{uuid.uuid4().hex[:8]}"
        rel_path = f"{day}/{stem}.md"
        file_path = root / day / f"{stem}.md"

        await asyncio.to_thread(_write_new_file, file_path, text)
        logger.debug("Wrote %s entry %s", scope, file_path)

        entry = JournalEntry(
            id=f"{day}/{stem}",
            scope=scope,
            text=text,
            sections=list(sections),
            timestamp=int(now.timestamp() * 1000),
            storage_path=str(file_path),
        )
        metadata = EntryMetadata(
            text=text,
            sections=entry.sections,
            timestamp=entry.timestamp,
            path=rel_path,
            type=scope,
        )
        try:
            await self._index.add(entry.id, text, metadata)
        except Exception as exc:
            logger.error("Entry saved to %s but could not be indexed: %s", file_path, exc)
            raise
        return entry

    async def write_thoughts(self, thoughts: Mapping[str, str | None]) -> list[JournalEntry]:
        """Write one entry per non-empty category, each to its own scope.

        Raises:
            NoContentProvided: If every category is None.
            ValueError: If a category name is not recognised.
        """
        unknown = sorted(set(thoughts) - set(THOUGHT_CATEGORIES))
        if unknown:
            raise ValueError(f"Unknown thought categories: {', '.join(unknown)}")

        present = [(name, text) for name, text in thoughts.items() if text is not None]
        if not present:
            raise NoContentProvided("At least one thought category must be provided.")

        entries: list[JournalEntry] = []
        for name, text in present:
            scope, heading = THOUGHT_CATEGORIES[name]
            body = f"## {heading}\n\n{text}"
            entries.append(await self.write_entry(scope, body, sections=[name]))
        return entries


def _write_new_file(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("x", encoding="utf-8", newline="") as fh:
        fh.write(text)
