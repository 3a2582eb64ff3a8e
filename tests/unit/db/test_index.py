"""Tests for ScopedVectorIndex — lazy init, scoped add/query/list, delete, reset."""

from __future__ import annotations

import asyncio
import sqlite3
from unittest.mock import AsyncMock, patch

import pytest

from private_journal.db.index import ScopedVectorIndex
from private_journal.db.models import EntryMetadata, TimestampRange
from private_journal.db.vectors import MAX_KNN_K, ensure_collection
from private_journal.exceptions import (
    EmbeddingDimensionMismatch,
    EntryNotFound,
    IndexUnavailable,
)


def _meta(text: str, scope: str = "project", ts: int = 1_000, sections=None) -> EntryMetadata:
    return EntryMetadata(
        text=text,
        sections=sections or [],
        timestamp=ts,
        path=f"2026-01-01/{ts}.md",
        type=scope,
    )


# ------------------------------------------------------------------
# Initialization
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_index_starts_uninitialized(index):
    assert not index.ready
    assert index.dimensions is None


@pytest.mark.asyncio
async def test_initialize_creates_both_collections(index, fake_local):
    await index.initialize()
    assert index.ready
    assert index.dimensions == fake_local.dimensions
    assert await index.count("project") == 0
    assert await index.count("user") == 0


@pytest.mark.asyncio
async def test_concurrent_first_use_initializes_once(index, fake_local):
    """Callers arriving during initialization join the in-flight attempt."""
    with patch(
        "private_journal.db.index.ensure_collection",
        wraps=ensure_collection,
    ) as spy:
        await asyncio.gather(
            index.initialize(),
            index.initialize(),
            index.add("a", "first entry", _meta("first entry")),
            index.list("user"),
        )

    assert fake_local.load_calls == 1
    assert spy.call_count == 2  # one per scope, not per caller


@pytest.mark.asyncio
async def test_initialize_is_noop_once_ready(index, fake_local):
    await index.initialize()
    await index.initialize()
    assert fake_local.load_calls == 1


@pytest.mark.asyncio
async def test_failed_initialization_is_shared_by_waiters(index):
    with patch(
        "private_journal.db.index.open_index_db",
        side_effect=sqlite3.OperationalError("unable to open database file"),
    ) as mock_connect:
        results = await asyncio.gather(
            index.initialize(), index.initialize(), return_exceptions=True
        )

    assert all(isinstance(r, IndexUnavailable) for r in results)
    assert mock_connect.call_count == 1
    assert not index.ready


@pytest.mark.asyncio
async def test_later_call_after_failure_starts_fresh_attempt(index):
    with patch(
        "private_journal.db.index.open_index_db",
        side_effect=sqlite3.OperationalError("disk I/O error"),
    ):
        with pytest.raises(IndexUnavailable):
            await index.initialize()

    await index.initialize()
    assert index.ready


@pytest.mark.asyncio
async def test_cancelled_waiter_does_not_restart_initialization(index, fake_local):
    gate = asyncio.Event()

    async def slow_load():
        fake_local.load_calls += 1
        await gate.wait()

    fake_local.load = slow_load

    waiter = asyncio.ensure_future(index.initialize())
    for _ in range(3):
        await asyncio.sleep(0)
    assert fake_local.load_calls == 1

    waiter.cancel()
    with pytest.raises(asyncio.CancelledError):
        await waiter

    late = asyncio.ensure_future(index.initialize())
    for _ in range(3):
        await asyncio.sleep(0)
    gate.set()
    await late

    assert index.ready
    assert fake_local.load_calls == 1


@pytest.mark.asyncio
async def test_unreachable_path_raises_index_unavailable(tmp_path, gateway):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file in the way")
    idx = ScopedVectorIndex(blocker / "journal.db", gateway)
    try:
        with pytest.raises(IndexUnavailable, match="Cannot open journal index"):
            await idx.add("a", "text", _meta("text"))
    finally:
        await idx.close()


# ------------------------------------------------------------------
# add / query
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_add_then_query_returns_nearest_first(index):
    await index.add("p1", "deploy the api service", _meta("deploy the api service", ts=1))
    await index.add("p2", "lunch was pasta", _meta("lunch was pasta", ts=2))

    vector = await index.embed("deploy api")
    hits = await index.query("project", vector, limit=10)

    assert [h.id for h in hits] == ["p1", "p2"]
    assert hits[0].distance <= hits[1].distance
    assert hits[0].metadata.text == "deploy the api service"
    assert hits[0].metadata.type == "project"


@pytest.mark.asyncio
async def test_add_routes_by_metadata_type(index):
    await index.add("u1", "a feeling", _meta("a feeling", scope="user"))

    vector = await index.embed("a feeling")
    assert await index.query("project", vector, limit=5) == []
    user_hits = await index.query("user", vector, limit=5)
    assert [h.id for h in user_hits] == ["u1"]


@pytest.mark.asyncio
async def test_metadata_roundtrip(index):
    meta = _meta("tagged", ts=42, sections=["feelings", "project_notes"])
    await index.add("t1", "tagged", meta)

    [entry] = await index.list("project")
    assert entry.metadata == meta
    assert entry.distance is None


@pytest.mark.asyncio
async def test_query_limit(index):
    for i in range(5):
        await index.add(f"p{i}", f"note {i}", _meta(f"note {i}", ts=i))

    vector = await index.embed("note")
    assert len(await index.query("project", vector, limit=2)) == 2


@pytest.mark.asyncio
async def test_query_limit_above_knn_cap_is_clamped(index):
    await index.add("p1", "only entry", _meta("only entry"))

    vector = await index.embed("only entry")
    hits = await index.query("project", vector, limit=MAX_KNN_K + 904)
    assert [h.id for h in hits] == ["p1"]


@pytest.mark.asyncio
async def test_query_applies_timestamp_filter(index):
    for ts in (100, 200, 300):
        await index.add(f"p{ts}", "same words", _meta("same words", ts=ts))

    vector = await index.embed("same words")
    hits = await index.query("project", vector, limit=10, raw_filter=TimestampRange(start=150, end=250))
    assert [h.id for h in hits] == ["p200"]


@pytest.mark.asyncio
async def test_add_dimension_mismatch(index, fake_local):
    await index.initialize()
    fake_local.embed = AsyncMock(return_value=[0.1, 0.2, 0.3])

    with pytest.raises(EmbeddingDimensionMismatch, match="expects 16"):
        await index.add("x", "text", _meta("text"))
    assert await index.count("project") == 0


@pytest.mark.asyncio
async def test_query_dimension_mismatch(index):
    await index.initialize()
    with pytest.raises(EmbeddingDimensionMismatch):
        await index.query("project", [1.0, 0.0], limit=1)


@pytest.mark.asyncio
async def test_unknown_scope_rejected(index):
    with pytest.raises(ValueError, match="scope"):
        await index.list("team")


# ------------------------------------------------------------------
# list
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_newest_first_with_limit(index):
    for ts in (10, 30, 20):
        await index.add(f"u{ts}", f"entry {ts}", _meta(f"entry {ts}", scope="user", ts=ts))

    entries = await index.list("user", limit=2)
    assert [e.id for e in entries] == ["u30", "u20"]


@pytest.mark.asyncio
async def test_list_timestamp_filter(index):
    for ts in (10, 20, 30):
        await index.add(f"u{ts}", "x", _meta("x", scope="user", ts=ts))

    entries = await index.list("user", raw_filter=TimestampRange(start=20), limit=10)
    assert {e.id for e in entries} == {"u20", "u30"}

    entries = await index.list("user", raw_filter=TimestampRange(end=20), limit=10)
    assert {e.id for e in entries} == {"u10", "u20"}


# ------------------------------------------------------------------
# delete / reset
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_delete_removes_entry(index):
    await index.add("p1", "keep", _meta("keep", ts=1))
    await index.add("p2", "drop", _meta("drop", ts=2))

    await index.delete("p2", "project")

    assert [e.id for e in await index.list("project")] == ["p1"]


@pytest.mark.asyncio
async def test_delete_unknown_id_raises(index):
    await index.add("p1", "keep", _meta("keep"))
    with pytest.raises(EntryNotFound, match="p404"):
        await index.delete("p404", "project")


@pytest.mark.asyncio
async def test_delete_wrong_scope_raises(index):
    await index.add("p1", "keep", _meta("keep"))
    with pytest.raises(EntryNotFound):
        await index.delete("p1", "user")


@pytest.mark.asyncio
async def test_reset_empties_both_collections(index):
    await index.add("p1", "project text", _meta("project text"))
    await index.add("u1", "user text", _meta("user text", scope="user"))

    await index.reset()

    assert await index.count("project") == 0
    assert await index.count("user") == 0
    # Collections are usable again right away.
    await index.add("p2", "after reset", _meta("after reset"))
    assert await index.count("project") == 1


@pytest.mark.asyncio
async def test_data_persists_across_instances(tmp_path, gateway):
    path = tmp_path / "journal.db"
    first = ScopedVectorIndex(path, gateway)
    await first.add("p1", "durable", _meta("durable"))
    await first.close()

    second = ScopedVectorIndex(path, gateway)
    try:
        assert [e.id for e in await second.list("project")] == ["p1"]
    finally:
        await second.close()
