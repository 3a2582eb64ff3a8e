"""Process-wide journal wiring.

One Journal is built at process start from a JournalConfig. It owns the
single ScopedVectorIndex and hands it by reference to the entry store and
the search service. Use it as an async context manager so the index is
closed on exit.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path

from private_journal.config import JournalConfig
from private_journal.db.index import ScopedVectorIndex
from private_journal.db.models import (
    SCOPES,
    DateRange,
    IndexedEntry,
    JournalEntry,
    Scope,
    SearchResult,
)
from private_journal.embeddings.gateway import EmbeddingGateway
from private_journal.embeddings.local import LocalEmbedding
from private_journal.ingest.entry_store import EntryStore
from private_journal.paths import (
    resolve_index_path,
    resolve_project_journal_path,
    resolve_user_journal_path,
)
from private_journal.rag.search import SearchService


class Journal:
    """Entry point for every journal operation.

    Args:
        config: Merged configuration (see load_config()).
        cwd: Base for the project journal path (defaults to the CWD).
        home: Replacement for ``~`` in user paths (defaults to the home dir).
    """

    def __init__(
        self,
        config: JournalConfig,
        *,
        cwd: Path | None = None,
        home: Path | None = None,
    ) -> None:
        self.config = config
        self.project_root = resolve_project_journal_path(config, cwd)
        self.user_root = resolve_user_journal_path(config, home)
        self.index_path = resolve_index_path(config, home)

        self.gateway = EmbeddingGateway(
            config.embedding.to_gateway_config(),
            local=LocalEmbedding(config.embedding.local_model),
        )
        self.index = ScopedVectorIndex(self.index_path, self.gateway)
        self.store = EntryStore(self.project_root, self.user_root, self.index)
        self.searcher = SearchService(self.index, self.project_root, self.user_root)

    async def __aenter__(self) -> Journal:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self.index.close()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def write_thoughts(self, thoughts: Mapping[str, str | None]) -> list[JournalEntry]:
        return await self.store.write_thoughts(thoughts)

    async def write_entry(
        self, scope: Scope, text: str, sections: Sequence[str] = ()
    ) -> JournalEntry:
        return await self.store.write_entry(scope, text, sections)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def search(
        self,
        query: str,
        *,
        limit: int = 10,
        scope: str = "both",
        sections: Sequence[str] | None = None,
        date_range: DateRange | None = None,
    ) -> list[SearchResult]:
        return await self.searcher.search(
            query, limit=limit, scope=scope, sections=sections, date_range=date_range
        )

    async def list_recent(
        self,
        *,
        limit: int = 10,
        scope: str = "both",
        date_range: DateRange | None = None,
    ) -> list[IndexedEntry]:
        return await self.searcher.list_recent(limit=limit, scope=scope, date_range=date_range)

    async def read_entry(self, path: str) -> str | None:
        return await self.searcher.read_entry(path)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def delete_entry(self, entry_id: str, scope: Scope) -> None:
        """Remove an entry from the index. The markdown file is left in place."""
        await self.index.delete(entry_id, scope)

    async def reset(self) -> None:
        await self.index.reset()

    async def entry_counts(self) -> dict[str, int]:
        """Indexed entries per scope."""
        return {scope: await self.index.count(scope) for scope in SCOPES}
