"""Durable note storage grouped by repository."""

from repostudy.notes.note_store import (
    NoteStore,
    note_file_name,
    parse_note,
    render_note,
    sanitize_name,
)

__all__ = [
    "NoteStore",
    "note_file_name",
    "parse_note",
    "render_note",
    "sanitize_name",
]
