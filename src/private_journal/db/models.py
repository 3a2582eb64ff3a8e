"""Domain models for journal entries and index records."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Literal

Scope = Literal["project", "user"]

# Query order matters: project results precede user results on score ties.
SCOPES: tuple[Scope, ...] = ("project", "user")


@dataclass(frozen=True)
class JournalEntry:
    """A written entry. Immutable once created."""

    id: str
    scope: Scope
    text: str
    sections: list[str]
    timestamp: int  # epoch ms
    storage_path: str


@dataclass
class EntryMetadata:
    """Record stored next to each vector in a scope collection.

    Attributes:
        text: The full entry text.
        sections: Category tags (e.g. ``feelings``, ``project_notes``); may be empty.
        timestamp: Creation time in epoch milliseconds.
        path: File path relative to the scope root (``YYYY-MM-DD/<name>.md``).
        type: The scope the entry belongs to.
    """

    text: str
    sections: list[str] = field(default_factory=list)
    timestamp: int = 0
    path: str = ""
    type: Scope = "project"

    @property
    def sections_json(self) -> str:
        return json.dumps(self.sections)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class IndexedEntry:
    """An entry as returned by the vector index.

    ``distance`` is the raw cosine distance for similarity queries and None
    for plain listings.
    """

    id: str
    metadata: EntryMetadata
    distance: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {**self.metadata.to_dict(), "id": self.id}


@dataclass
class SearchResult:
    """A similarity hit. ``score = 1 - distance``; higher is closer."""

    id: str
    metadata: EntryMetadata
    score: float

    def to_dict(self) -> dict[str, Any]:
        return {**self.metadata.to_dict(), "score": self.score, "id": self.id}


@dataclass(frozen=True)
class TimestampRange:
    """Inclusive epoch-ms bounds: the only filter the index applies natively."""

    start: int | None = None
    end: int | None = None

    def is_empty(self) -> bool:
        return self.start is None and self.end is None


@dataclass(frozen=True)
class DateRange:
    """Caller-facing date bounds; either side may be open."""

    start: datetime | None = None
    end: datetime | None = None

    def to_timestamp_range(self) -> TimestampRange:
        return TimestampRange(
            start=_to_ms(self.start) if self.start is not None else None,
            end=_to_ms(self.end) if self.end is not None else None,
        )


def _to_ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)
