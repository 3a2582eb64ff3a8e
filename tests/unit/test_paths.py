"""Tests for journal path resolution."""

from __future__ import annotations

from pathlib import Path

from private_journal.config import JournalConfig
from private_journal.paths import (
    resolve_index_path,
    resolve_project_journal_path,
    resolve_user_journal_path,
)


def test_default_paths(tmp_path: Path) -> None:
    cfg = JournalConfig()
    home = tmp_path / "home"
    cwd = tmp_path / "work"

    assert resolve_project_journal_path(cfg, cwd) == (cwd / ".private-journal").resolve()
    assert resolve_user_journal_path(cfg, home) == (home / ".private-journal").resolve()
    assert resolve_index_path(cfg, home) == (home / ".private-journal" / ".index.db").resolve()


def test_absolute_paths_are_kept(tmp_path: Path) -> None:
    cfg = JournalConfig()
    cfg.settings.project_journal_path = str(tmp_path / "abs-project")
    cfg.settings.user_journal_path = str(tmp_path / "abs-user")
    cfg.index.path = str(tmp_path / "abs.db")

    assert resolve_project_journal_path(cfg, tmp_path / "elsewhere") == tmp_path.resolve() / "abs-project"
    assert resolve_user_journal_path(cfg, tmp_path / "home") == tmp_path.resolve() / "abs-user"
    assert resolve_index_path(cfg, tmp_path / "home") == tmp_path.resolve() / "abs.db"


def test_relative_project_path_uses_cwd(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    cfg = JournalConfig()
    cfg.settings.project_journal_path = "docs/journal"

    assert resolve_project_journal_path(cfg) == tmp_path.resolve() / "docs" / "journal"


def test_tilde_only_expanded_at_start(tmp_path: Path) -> None:
    cfg = JournalConfig()
    cfg.settings.user_journal_path = str(tmp_path / "a~b")

    assert resolve_user_journal_path(cfg, tmp_path / "home") == tmp_path.resolve() / "a~b"


def test_bare_tilde_is_home(tmp_path: Path) -> None:
    cfg = JournalConfig()
    cfg.settings.user_journal_path = "~"

    assert resolve_user_journal_path(cfg, tmp_path) == tmp_path.resolve()
