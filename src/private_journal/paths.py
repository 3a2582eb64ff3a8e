"""Path resolution for the journal roots and the index database."""

from __future__ import annotations

from pathlib import Path

from private_journal.config import JournalConfig


def _expand_home(raw: str, home: Path | None) -> Path:
    """Replace a literal leading ``~`` with *home* (defaults to the user's home)."""
    if raw.startswith("~"):
        base = str(home if home is not None else Path.home())
        raw = base + raw[1:]
    return Path(raw).resolve()


def resolve_user_journal_path(config: JournalConfig, home: Path | None = None) -> Path:
    """Absolute path of the user-wide journal root."""
    return _expand_home(config.settings.user_journal_path, home)


def resolve_project_journal_path(config: JournalConfig, cwd: Path | None = None) -> Path:
    """Absolute path of the project journal root, relative to *cwd* (default: CWD)."""
    base = cwd if cwd is not None else Path.cwd()
    return (base / config.settings.project_journal_path).resolve()


def resolve_index_path(config: JournalConfig, home: Path | None = None) -> Path:
    """Absolute path of the vector index database."""
    return _expand_home(config.index.path, home)
