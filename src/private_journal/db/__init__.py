"""Journal index layer."""

from private_journal.db.index import ScopedVectorIndex
from private_journal.db.vectors import (
    MAX_KNN_K,
    collection_name,
    drop_collection,
    ensure_collection,
    model_to_slug,
    open_index_db,
)

__all__ = [
    "MAX_KNN_K",
    "ScopedVectorIndex",
    "collection_name",
    "drop_collection",
    "ensure_collection",
    "model_to_slug",
    "open_index_db",
]
