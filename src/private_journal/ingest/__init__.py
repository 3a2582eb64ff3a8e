"""Journal entry persistence."""

from private_journal.ingest.entry_store import THOUGHT_CATEGORIES, EntryStore

__all__ = ["EntryStore", "THOUGHT_CATEGORIES"]
