"""Rich error messages for the journal CLI.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from private_journal.cli.errors import err_no_thoughts
    console.print(err_no_thoughts())
    raise typer.Exit(1)
"""

from __future__ import annotations


def err_no_thoughts() -> str:
    """No thought category was given to ``add``."""
    return (
        "[red]Error:[/] At least one thought category must be provided.\n"
        "  Use one or more of: --feelings, --project-notes, --user-context,\n"
        "  --technical-insights, --world-knowledge"
    )


def err_config(detail: str) -> str:
    """Config file failed validation."""
    return (
        f"[red]Error:[/] Invalid journal configuration.\n"
        f"  {detail}"
    )


def err_index_unavailable(detail: str) -> str:
    """Vector index could not be opened or written."""
    return (
        f"[red]Error:[/] The journal index is unavailable.\n"
        f"  {detail}\n"
        "  Check that the index.path directory is writable, then retry."
    )


def err_dimension_mismatch(detail: str) -> str:
    """Embedding size does not fit the existing collection."""
    return (
        f"[red]Error:[/] {detail}\n"
        "  Run with the embedding provider the index was built with,\n"
        "  or rebuild it:  private-journal reset"
    )


def err_entry_not_found(path: str) -> str:
    """``read`` target does not exist."""
    return (
        f"[yellow]Entry not found:[/] '{path}'\n"
        "  Run:  private-journal list  to see recent entries and their paths."
    )


def err_unknown_entry_id(entry_id: str, scope: str) -> str:
    """``delete`` target is not in the index."""
    return (
        f"[yellow]Entry not found:[/] no {scope} entry with id '{entry_id}'.\n"
        f"  Run:  private-journal list --type {scope}  to see entry ids."
    )


def err_write_failed(detail: str) -> str:
    """The journal file could not be written."""
    return (
        f"[red]Error:[/] Failed to write journal entry.\n"
        f"  {detail}\n"
        "  Check that the journal directory exists and is writable."
    )


def warn_not_indexed() -> str:
    """Shown when a file was saved but could not be indexed."""
    return (
        "[yellow]⚠[/] Entries written before the failure are saved on disk\n"
        "  but are not searchable until the index is available again."
    )
