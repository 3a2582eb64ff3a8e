"""Scoped vector index — one sqlite-vec collection per scope.

Initialization is lazy and happens at most once at a time: the first caller
starts it and stores the pending task, every caller (the first included)
awaits that same task. A failed initialization is shared by everyone waiting
on it; the memo is then cleared so a later call can try again.

All SQLite work runs on a single dedicated worker thread. The connection is
opened on that thread and never leaves it.
"""

from __future__ import annotations

import asyncio
import functools
import json
import logging
import sqlite3
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, TypeVar

from private_journal.db.models import SCOPES, EntryMetadata, IndexedEntry, TimestampRange
from private_journal.db.vectors import (
    MAX_KNN_K,
    drop_collection,
    ensure_collection,
    model_to_slug,
    open_index_db,
)
from private_journal.exceptions import (
    EmbeddingDimensionMismatch,
    EntryNotFound,
    IndexUnavailable,
)

if TYPE_CHECKING:
    from private_journal.embeddings.gateway import EmbeddingGateway

logger = logging.getLogger(__name__)

T = TypeVar("T")

_COLUMNS = "entry_id, created_ms, body, sections_json, rel_path, scope"


class ScopedVectorIndex:
    """Similarity index holding the ``project`` and ``user`` collections.

    Args:
        db_path: SQLite file holding both collections (created if missing).
        gateway: Embedding gateway used for indexing and query embedding. Its
            effective model decides which pair of collections is used.
    """

    def __init__(self, db_path: Path | str, gateway: EmbeddingGateway) -> None:
        self._db_path = Path(db_path)
        self._gateway = gateway
        self._conn: sqlite3.Connection | None = None
        self._tables: dict[str, str] = {}
        self._dimensions: int | None = None
        self._init_task: asyncio.Future[None] | None = None
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="journal-index")

    @property
    def gateway(self) -> EmbeddingGateway:
        return self._gateway

    @property
    def ready(self) -> bool:
        return self._conn is not None

    @property
    def dimensions(self) -> int | None:
        return self._dimensions

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Open the database and create both collections (at most once)."""
        if self._conn is not None:
            return

        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._do_initialize())
        task = self._init_task

        try:
            await asyncio.shield(task)
        except BaseException:
            # A cancelled waiter leaves the shielded task running; only a
            # finished (failed) attempt is forgotten.
            if self._init_task is task and task.done():
                self._init_task = None
            raise

    async def _do_initialize(self) -> None:
        logger.debug("Initializing journal index at %s", self._db_path)
        await self._gateway.prepare()

        slug = model_to_slug(self._gateway.model)
        dimensions = self._gateway.dimensions

        def _setup() -> tuple[sqlite3.Connection, dict[str, str]]:
            conn = open_index_db(self._db_path)
            try:
                tables = {
                    scope: ensure_collection(conn, scope, slug, dimensions) for scope in SCOPES
                }
            except sqlite3.Error:
                conn.close()
                raise
            return conn, tables

        try:
            conn, tables = await self._run(_setup)
        except (sqlite3.Error, OSError) as exc:
            logger.error("Failed to initialize journal index: %s", exc)
            raise IndexUnavailable(
                f"Cannot open journal index at '{self._db_path}': {exc}"
            ) from exc

        self._conn = conn
        self._tables = tables
        self._dimensions = dimensions
        logger.info("Journal index ready (%s, %d dimensions)", slug, dimensions)

    async def close(self) -> None:
        """Close the connection and stop the worker thread."""
        conn = self._conn
        self._conn = None
        self._init_task = None
        if conn is not None:
            await self._run(conn.close)
        self._executor.shutdown(wait=False)

    # ------------------------------------------------------------------
    # Embedding
    # ------------------------------------------------------------------

    async def embed(self, text: str) -> list[float]:
        """Embed *text* with the index's gateway (used for query vectors)."""
        return await self._gateway.embed(text)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def add(self, entry_id: str, text: str, metadata: EntryMetadata) -> None:
        """Embed *text* and insert it into the collection for ``metadata.type``.

        Raises:
            IndexUnavailable: If the collection cannot be reached or written.
            EmbeddingDimensionMismatch: If the vector does not fit the collection.
        """
        await self.initialize()
        table = self._table(metadata.type)

        vector = await self._gateway.embed(text)
        self._check_dimensions(vector)

        def _insert() -> None:
            conn = self._connection()
            conn.execute(
                f"""
                INSERT INTO {table}
                    (entry_id, embedding, created_ms, body, sections_json, rel_path, scope)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry_id,
                    json.dumps(vector),
                    metadata.timestamp,
                    metadata.text,
                    metadata.sections_json,
                    metadata.path,
                    metadata.type,
                ),
            )
            conn.commit()

        await self._guarded(_insert, f"add entry '{entry_id}'")
        logger.debug("Indexed %s entry %s", metadata.type, entry_id)

    async def delete(self, entry_id: str, scope: str) -> None:
        """Remove *entry_id* from the *scope* collection.

        Raises:
            EntryNotFound: If the collection holds no such id.
        """
        await self.initialize()
        table = self._table(scope)

        def _delete() -> bool:
            conn = self._connection()
            found = conn.execute(
                f"SELECT entry_id FROM {table} WHERE entry_id = ?", (entry_id,)
            ).fetchone()
            if found is None:
                return False
            conn.execute(f"DELETE FROM {table} WHERE entry_id = ?", (entry_id,))
            conn.commit()
            return True

        if not await self._guarded(_delete, f"delete entry '{entry_id}'"):
            raise EntryNotFound(f"No {scope} entry with id '{entry_id}'.")

    async def reset(self) -> None:
        """Drop and recreate both collections empty. Destructive."""
        await self.initialize()
        slug = model_to_slug(self._gateway.model)
        dimensions = self._dimensions or self._gateway.dimensions

        def _reset() -> dict[str, str]:
            conn = self._connection()
            for table in self._tables.values():
                drop_collection(conn, table)
            return {scope: ensure_collection(conn, scope, slug, dimensions) for scope in SCOPES}

        self._tables = await self._guarded(_reset, "reset collections")
        logger.warning("Journal index reset: all collections emptied")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def query(
        self,
        scope: str,
        vector: list[float],
        limit: int,
        raw_filter: TimestampRange | None = None,
    ) -> list[IndexedEntry]:
        """Return up to *limit* nearest entries in *scope*, closest first.

        *raw_filter* carries the only constraint the index evaluates natively
        (a timestamp range). Section filtering is the caller's job. sqlite-vec
        answers at most MAX_KNN_K neighbours per query; larger limits are
        clamped.
        """
        await self.initialize()
        table = self._table(scope)
        self._check_dimensions(vector)
        k = min(limit, MAX_KNN_K)

        where, params = _timestamp_clause(raw_filter)
        sql = (
            f"SELECT {_COLUMNS}, distance FROM {table} "
            f"WHERE embedding MATCH ? AND k = ?{where} ORDER BY distance"
        )

        def _query() -> list[IndexedEntry]:
            rows = self._connection().execute(sql, (json.dumps(vector), k, *params)).fetchall()
            return [_row_to_entry(r, r["distance"]) for r in rows]

        return await self._guarded(_query, f"query {scope} collection")

    async def list(
        self,
        scope: str,
        raw_filter: TimestampRange | None = None,
        limit: int = 10,
    ) -> list[IndexedEntry]:
        """Return up to *limit* entries in *scope* without any vector ranking."""
        await self.initialize()
        table = self._table(scope)

        where, params = _timestamp_clause(raw_filter)
        if where:
            where = " WHERE" + where[len(" AND"):]
        sql = f"SELECT {_COLUMNS} FROM {table}{where} ORDER BY created_ms DESC LIMIT ?"

        def _list() -> list[IndexedEntry]:
            rows = self._connection().execute(sql, (*params, limit)).fetchall()
            return [_row_to_entry(r, None) for r in rows]

        return await self._guarded(_list, f"list {scope} collection")

    async def count(self, scope: str) -> int:
        """Return the number of entries in the *scope* collection."""
        await self.initialize()
        table = self._table(scope)

        def _count() -> int:
            return self._connection().execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]

        return await self._guarded(_count, f"count {scope} collection")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _run(self, fn: Callable[..., T], *args: Any) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, functools.partial(fn, *args))

    async def _guarded(self, fn: Callable[[], T], action: str) -> T:
        """Run *fn* on the worker; backing-store errors become IndexUnavailable."""
        try:
            return await self._run(fn)
        except sqlite3.Error as exc:
            raise IndexUnavailable(f"Journal index failed to {action}: {exc}") from exc

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise IndexUnavailable("Journal index is closed.")
        return self._conn

    def _table(self, scope: str) -> str:
        try:
            return self._tables[scope]
        except KeyError:
            raise ValueError(f"Unknown scope '{scope}' — expected one of {SCOPES}.") from None

    def _check_dimensions(self, vector: list[float]) -> None:
        if self._dimensions is not None and len(vector) != self._dimensions:
            raise EmbeddingDimensionMismatch(self._dimensions, len(vector))


# ------------------------------------------------------------------
# Row → model helpers
# ------------------------------------------------------------------


def _timestamp_clause(raw_filter: TimestampRange | None) -> tuple[str, list[int]]:
    """Translate a TimestampRange into `` AND created_ms ...`` SQL + params."""
    if raw_filter is None:
        return "", []
    clause = ""
    params: list[int] = []
    if raw_filter.start is not None:
        clause += " AND created_ms >= ?"
        params.append(raw_filter.start)
    if raw_filter.end is not None:
        clause += " AND created_ms <= ?"
        params.append(raw_filter.end)
    return clause, params


def _row_to_entry(row: sqlite3.Row, distance: float | None) -> IndexedEntry:
    return IndexedEntry(
        id=row["entry_id"],
        metadata=EntryMetadata(
            text=row["body"],
            sections=json.loads(row["sections_json"] or "[]"),
            timestamp=row["created_ms"],
            path=row["rel_path"],
            type=row["scope"],
        ),
        distance=distance,
    )
