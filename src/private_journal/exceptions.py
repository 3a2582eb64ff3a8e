"""Error taxonomy for the journal core.

Index and storage failures always propagate to the caller. Embedding provider
degradation is a warning, never a caller-visible error.
"""

from __future__ import annotations


class JournalError(Exception):
    """Base class for all journal errors."""


class NoContentProvided(JournalError):
    """Every thought category was empty — nothing to write."""


class EntryNotFound(JournalError):
    """No entry with the given id exists in the scope collection."""


class IndexUnavailable(JournalError):
    """The backing vector store could not be created, opened, or written."""


class EmbeddingDimensionMismatch(JournalError):
    """A vector's length does not match the collection it is meant for."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Embedding has {actual} dimensions but the collection expects {expected}. "
            "Vectors from different embedding providers cannot share a collection."
        )
        self.expected = expected
        self.actual = actual


class EmbeddingProviderDegraded(UserWarning):
    """A remote embedding provider was replaced by local embeddings."""
