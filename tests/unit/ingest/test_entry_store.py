"""Tests for EntryStore — file layout, thought routing, and write ordering."""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from private_journal.exceptions import IndexUnavailable, NoContentProvided
from private_journal.ingest.entry_store import THOUGHT_CATEGORIES, EntryStore

_FIXED = datetime(2026, 3, 14, 9, 26, 53, 589793)
_NAME_RE = re.compile(r"^09-26-53-589793-[0-9a-f]{8}\.md$")


@pytest.fixture
def store(roots, index) -> EntryStore:
    project_root, user_root = roots
    return EntryStore(project_root, user_root, index, clock=lambda: _FIXED)


def _md_files(root: Path) -> list[Path]:
    return sorted(root.rglob("*.md")) if root.exists() else []


# ---------------------------------------------------------------------------
# write_entry
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_write_entry_layout(store: EntryStore, roots) -> None:
    project_root, _ = roots
    entry = await store.write_entry("project", "## Project Notes\n\nShip it.", ["project_notes"])

    path = Path(entry.storage_path)
    assert path.parent == project_root / "2026-03-14"
    assert _NAME_RE.match(path.name)
    assert path.read_text(encoding="utf-8") == "## Project Notes\n\nShip it."

    assert entry.id == f"2026-03-14/{path.stem}"
    assert entry.scope == "project"
    assert entry.sections == ["project_notes"]
    assert entry.timestamp == int(_FIXED.timestamp() * 1000)


@pytest.mark.asyncio
async def test_write_entry_indexes_with_relative_path(store: EntryStore, index) -> None:
    entry = await store.write_entry("user", "plain text")

    [indexed] = await index.list("user")
    assert indexed.id == entry.id
    assert indexed.metadata.text == "plain text"
    assert indexed.metadata.path == f"{entry.id}.md"
    assert indexed.metadata.type == "user"
    assert indexed.metadata.sections == []
    assert await index.count("project") == 0


@pytest.mark.asyncio
async def test_same_instant_writes_get_distinct_names(store: EntryStore, roots) -> None:
    _, user_root = roots
    entries = [await store.write_entry("user", f"entry {i}") for i in range(3)]

    files = _md_files(user_root)
    assert len(files) == 3
    assert len({e.id for e in entries}) == 3
    assert {f.parent.name for f in files} == {"2026-03-14"}


@pytest.mark.asyncio
async def test_write_entry_unknown_scope(store: EntryStore) -> None:
    with pytest.raises(ValueError, match="Unknown scope"):
        await store.write_entry("team", "text")


@pytest.mark.asyncio
async def test_index_failure_keeps_file_and_propagates(store: EntryStore, index, roots) -> None:
    project_root, _ = roots
    with patch.object(index, "add", AsyncMock(side_effect=IndexUnavailable("disk full"))):
        with pytest.raises(IndexUnavailable, match="disk full"):
            await store.write_entry("project", "durable anyway")

    [saved] = _md_files(project_root)
    assert saved.read_text(encoding="utf-8") == "durable anyway"


@pytest.mark.asyncio
async def test_file_write_failure_skips_indexing(tmp_path: Path, index) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    store = EntryStore(blocker, tmp_path / "user", index, clock=lambda: _FIXED)

    with patch.object(index, "add", AsyncMock()) as add:
        with pytest.raises(OSError):
            await store.write_entry("project", "never indexed")
    add.assert_not_called()


# ---------------------------------------------------------------------------
# write_thoughts
# ---------------------------------------------------------------------------


def test_thought_categories_routing() -> None:
    assert THOUGHT_CATEGORIES["project_notes"][0] == "project"
    user_side = {k for k, (scope, _) in THOUGHT_CATEGORIES.items() if scope == "user"}
    assert user_side == {"feelings", "user_context", "technical_insights", "world_knowledge"}


@pytest.mark.asyncio
async def test_write_thoughts_routes_by_category(store: EntryStore, roots) -> None:
    project_root, user_root = roots
    entries = await store.write_thoughts(
        {
            "feelings": "Relieved the migration worked.",
            "project_notes": "Migration script lives in tools/.",
            "user_context": None,
        }
    )

    assert [(e.scope, e.sections) for e in entries] == [
        ("user", ["feelings"]),
        ("project", ["project_notes"]),
    ]
    [project_file] = _md_files(project_root)
    [user_file] = _md_files(user_root)
    assert project_file.read_text(encoding="utf-8") == (
        "## Project Notes\n\nMigration script lives in tools/."
    )
    assert user_file.read_text(encoding="utf-8") == "## Feelings\n\nRelieved the migration worked."


@pytest.mark.asyncio
async def test_write_thoughts_empty_string_is_content(store: EntryStore, roots) -> None:
    _, user_root = roots
    [entry] = await store.write_thoughts({"world_knowledge": ""})
    assert entry.text == "## World Knowledge\n\n"
    assert len(_md_files(user_root)) == 1


@pytest.mark.asyncio
async def test_write_thoughts_all_none_writes_nothing(store: EntryStore, roots, index) -> None:
    project_root, user_root = roots
    with pytest.raises(NoContentProvided):
        await store.write_thoughts({"feelings": None, "project_notes": None})

    assert _md_files(project_root) == []
    assert _md_files(user_root) == []
    assert not index.ready


@pytest.mark.asyncio
async def test_write_thoughts_no_categories(store: EntryStore) -> None:
    with pytest.raises(NoContentProvided):
        await store.write_thoughts({})


@pytest.mark.asyncio
async def test_write_thoughts_unknown_category(store: EntryStore, roots) -> None:
    project_root, user_root = roots
    with pytest.raises(ValueError, match="moods"):
        await store.write_thoughts({"moods": "fine", "feelings": "ok"})
    assert _md_files(user_root) == []
