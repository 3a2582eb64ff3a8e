"""Per-scope, per-model sqlite-vec collections.

A collection is a vec0 virtual table named ``journal_{scope}_{model_slug}``.
Binding the model slug into the name keeps vectors from different embedding
providers (and therefore different dimensionalities) out of one collection.

Columns:
    entry_id      text primary key
    embedding     float[N], cosine distance
    created_ms    integer metadata column, filterable inside KNN queries
    +body, +sections_json, +rel_path, +scope   auxiliary (stored, not filterable)
"""

from __future__ import annotations

import re
import sqlite3
from pathlib import Path

import sqlite_vec

from private_journal.db.models import SCOPES

# Largest ``k`` sqlite-vec accepts in a KNN query.
MAX_KNN_K = 4096


def open_index_db(db_path: Path | str) -> sqlite3.Connection:
    """Create the parent directory, open *db_path* and load sqlite-vec.

    SQLite connections are bound to the opening thread, so this must run on
    the thread that will issue every later statement.
    """
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    conn.enable_load_extension(True)
    sqlite_vec.load(conn)
    conn.enable_load_extension(False)
    conn.execute("PRAGMA journal_mode = WAL")
    return conn


def model_to_slug(model: str) -> str:
    """Convert a provider/model string to a valid table name suffix.

    Examples:
        "openai/text-embedding-3-small" -> "openai_text_embedding_3_small"
        "local/all-MiniLM-L6-v2"        -> "local_all_minilm_l6_v2"
    """
    return re.sub(r"[^a-z0-9]", "_", model.lower())


def collection_name(scope: str, model_slug: str) -> str:
    """Return the vec table name for *scope* and *model_slug*."""
    if scope not in SCOPES:
        raise ValueError(f"Unknown scope '{scope}' — expected one of {SCOPES}.")
    if not re.fullmatch(r"[a-z0-9_]+", model_slug):
        raise ValueError(
            f"Invalid model_slug '{model_slug}' — use model_to_slug() to sanitize."
        )
    return f"journal_{scope}_{model_slug}"


def collection_exists(conn: sqlite3.Connection, table: str) -> bool:
    row = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name=?", (table,)
    ).fetchone()
    return row is not None


def ensure_collection(
    conn: sqlite3.Connection, scope: str, model_slug: str, dimensions: int
) -> str:
    """Create the collection for *scope* if it doesn't already exist.

    Args:
        conn: Active database connection (sqlite-vec must be loaded).
        scope: ``project`` or ``user``.
        model_slug: Sanitized model identifier (use model_to_slug() to generate).
        dimensions: Embedding vector dimensions (e.g. 384 for all-MiniLM-L6-v2).

    Returns:
        The table name.
    """
    if dimensions < 1:
        raise ValueError(f"dimensions must be >= 1, got {dimensions}")

    table = collection_name(scope, model_slug)
    if not collection_exists(conn, table):
        conn.execute(
            f"""
            CREATE VIRTUAL TABLE {table} USING vec0(
                entry_id text primary key,
                embedding float[{dimensions}] distance_metric=cosine,
                created_ms integer,
                +body text,
                +sections_json text,
                +rel_path text,
                +scope text
            )
            """
        )
        conn.commit()

    return table


def drop_collection(conn: sqlite3.Connection, table: str) -> None:
    """Drop *table* if present. Table names come from collection_name() only."""
    if not re.fullmatch(r"journal_[a-z]+_[a-z0-9_]+", table):
        raise ValueError(f"Refusing to drop non-journal table '{table}'.")
    conn.execute(f"DROP TABLE IF EXISTS {table}")
    conn.commit()
