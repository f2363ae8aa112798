"""
Filesystem-backed note persistence for studied repositories.

Notes are stored as markdown files grouped per repository:

    {notes_dir}/{sanitized repo}/NOTE_2024-01-01T12-00-00-000Z_1a2b3c4d.md
    {notes_dir}/{sanitized repo}/exports/{repo}_notes_export_2024-01-01.md

Writes fail loudly (StorageError); reads are best-effort and degrade to
empty results.
"""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from loguru import logger

from repostudy.core.exceptions import (
    EmptyCollection,
    NotFound,
    StorageError,
    UnsupportedFormat,
)
from repostudy.core.models import ExportArtifact, NoteEntry, NoteKind, StoredNote
from repostudy.search.text_search import DEFAULT_SNIPPET_RADIUS, extract_snippet

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]")

NOTE_SUFFIX = ".md"
EXPORTS_DIRNAME = "exports"

# Batch export formats (tag -> extension)
BATCH_FORMATS = {
    "markdown": ".md",
    "md": ".md",
    "json": ".json",
}

# =============================================================================
# Rendering
# =============================================================================

HEADERS = {
    NoteKind.NOTE: "Learning Note",
    NoteKind.QA: "Q&A Record",
}
FOOTER = "---\n*Generated by repostudy source study assistant*\n"

_META_PATTERN = re.compile(
    r"<!-- repostudy:note id=(?P<id>[0-9a-fA-F]+) "
    r"timestamp=(?P<timestamp>\S+) related=(?P<related>\d+)"
    r"(?: question=(?P<question>\d+))? -->"
)
_CONTENT_MARK = "## Content\n\n"
_QUESTION_MARK = "## Question\n\n"
_ANSWER_MARK = "\n\n## Answer\n\n"
_RELATED_MARK = "\n\n## Related Files\n\n"


def sanitize_name(name: str) -> str:
    """Replace every character outside [A-Za-z0-9_-] with '_'."""
    return _UNSAFE_CHARS.sub("_", name)


def utc_iso(ts: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a 'Z' suffix."""
    utc = ts.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def note_file_name(entry: NoteEntry) -> str:
    """``{KIND}_{timestamp}_{id[:8]}.md`` with ':' and '.' made filename-safe."""
    stamp = utc_iso(entry.timestamp).replace(":", "-").replace(".", "-")
    short_id = entry.id[:8] if entry.id else "unknown"
    return f"{entry.kind.file_prefix}_{stamp}_{short_id}{NOTE_SUFFIX}"


def render_note(entry: NoteEntry) -> str:
    """Render a NoteEntry into its self-contained markdown document."""
    local_time = entry.timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S %Z").strip()
    meta = (
        f"<!-- repostudy:note id={entry.id} "
        f"timestamp={entry.timestamp.isoformat()} "
        f"related={len(entry.related_files)}"
    )
    if entry.kind is NoteKind.QA:
        # Question length locates the answer even if the question repeats the marker
        meta += f" question={len(entry.question)}"
    parts = [
        f"# {HEADERS[entry.kind]}\n\n",
        f"**Time**: {local_time}\n\n",
        f"{meta} -->\n\n",
    ]

    if entry.kind is NoteKind.QA:
        parts.append(f"{_QUESTION_MARK}{entry.question}{_ANSWER_MARK}{entry.answer}\n\n")
        if entry.related_files:
            parts.append(_RELATED_MARK.lstrip("\n"))
            parts.append("\n".join(f"- {path}" for path in entry.related_files))
            parts.append("\n\n")
    else:
        parts.append(f"{_CONTENT_MARK}{entry.content}\n\n")

    parts.append(FOOTER)
    return "".join(parts)


def parse_note(body: str) -> NoteEntry:
    """
    Recover the NoteEntry a stored body was rendered from.

    Raises:
        ValueError: if the body was not produced by render_note
    """
    meta = _META_PATTERN.search(body)
    if meta is None or not body.endswith("\n\n" + FOOTER):
        raise ValueError("Not a repostudy note document")

    first_line = body.split("\n", 1)[0]
    kind = NoteKind.QA if first_line == f"# {HEADERS[NoteKind.QA]}" else NoteKind.NOTE
    payload_end = len(body) - len("\n\n" + FOOTER)
    common = {
        "id": meta.group("id"),
        "timestamp": datetime.fromisoformat(meta.group("timestamp")),
    }

    if kind is NoteKind.NOTE:
        start = body.index(_CONTENT_MARK, meta.end()) + len(_CONTENT_MARK)
        return NoteEntry(kind=kind, content=body[start:payload_end], **common)

    start = body.index(_QUESTION_MARK, meta.end()) + len(_QUESTION_MARK)
    section = body[start:payload_end]
    related: tuple[str, ...] = ()
    if int(meta.group("related")) > 0:
        section, _, listing = section.rpartition(_RELATED_MARK)
        related = tuple(line[2:] for line in listing.split("\n"))
    if meta.group("question") is None:
        question, _, answer = section.partition(_ANSWER_MARK)
    else:
        split = int(meta.group("question"))
        if section[split:split + len(_ANSWER_MARK)] != _ANSWER_MARK:
            raise ValueError("Q&A body does not match its recorded question length")
        question, answer = section[:split], section[split + len(_ANSWER_MARK):]
    return NoteEntry(
        kind=kind,
        question=question,
        answer=answer,
        related_files=related,
        **common,
    )


# =============================================================================
# Note Store
# =============================================================================


class NoteStore:
    """
    Manages note persistence.

    Each saved NoteEntry becomes exactly one new file; files are never
    rewritten. Repository directories are created on first save only.
    """

    def __init__(
        self,
        notes_dir: Path | str,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.notes_dir = Path(notes_dir)
        self._clock = clock

    def repo_dir(self, repo_name: str) -> Path:
        return self.notes_dir / sanitize_name(repo_name)

    def ensure_repo_dir(self, repo_name: str) -> Path:
        """Create the repository's note directory if needed."""
        path = self.repo_dir(repo_name)
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create note directory {path}: {e}") from e
        return path

    # =========================================================================
    # Writes
    # =========================================================================

    def save(self, repo_name: str, entry: NoteEntry) -> StoredNote:
        """
        Persist a note as a new markdown file.

        Raises:
            StorageError: if the file exists already or cannot be written
        """
        repo_dir = self.ensure_repo_dir(repo_name)
        file_name = note_file_name(entry)
        file_path = repo_dir / file_name
        content = render_note(entry)

        try:
            # newline="" keeps \r and \r\n in note text byte-exact
            with open(file_path, "x", encoding="utf-8", newline="") as f:
                f.write(content)
        except FileExistsError as e:
            raise StorageError(f"Note file already exists: {file_path}") from e
        except OSError as e:
            raise StorageError(f"Failed to save note {file_path}: {e}") from e

        logger.info(f"Note saved: {file_path}")
        return StoredNote(
            file_name=file_name,
            file_path=file_path,
            content=content,
            last_modified=datetime.fromtimestamp(file_path.stat().st_mtime),
        )

    def delete(self, repo_name: str, file_name: str) -> None:
        """
        Remove a stored note.

        Raises:
            NotFound: if no such note exists for the repository
            StorageError: if the file cannot be removed
        """
        file_path = self.repo_dir(repo_name) / file_name
        if Path(file_name).name != file_name or not file_path.is_file():
            raise NotFound(f"Note file not found: {file_path}")

        try:
            file_path.unlink()
        except OSError as e:
            raise StorageError(f"Failed to delete note {file_path}: {e}") from e
        logger.info(f"Note deleted: {file_path}")

    def export_all(self, repo_name: str, format: str = "markdown") -> ExportArtifact:
        """
        Combine every note of a repository into one document.

        Raises:
            UnsupportedFormat: format is not markdown/md/json
            EmptyCollection: the repository has no notes
            StorageError: the export cannot be written
        """
        tag = format.lower()
        if tag not in BATCH_FORMATS:
            raise UnsupportedFormat(format, list(BATCH_FORMATS))

        notes = self.list(repo_name)
        if not notes:
            raise EmptyCollection(repo_name)

        if BATCH_FORMATS[tag] == ".json":
            content = json.dumps([note.to_dict() for note in notes], indent=2, ensure_ascii=False)
        else:
            content = combine_notes_markdown(notes)

        export_dir = self.repo_dir(repo_name) / EXPORTS_DIRNAME
        file_name = (
            f"{sanitize_name(repo_name)}_notes_export_"
            f"{self._clock().strftime('%Y-%m-%d')}{BATCH_FORMATS[tag]}"
        )
        file_path = export_dir / file_name
        try:
            export_dir.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to export notes to {file_path}: {e}") from e

        logger.info(f"Exported {len(notes)} notes to {file_path}")
        return ExportArtifact(
            format=tag,
            file_name=file_name,
            byte_length=len(content.encode("utf-8")),
            path=file_path,
        )

    # =========================================================================
    # Reads (best-effort)
    # =========================================================================

    def list(self, repo_name: str) -> list[StoredNote]:
        """All notes of a repository, most recently modified first."""
        repo_dir = self.repo_dir(repo_name)
        if not repo_dir.is_dir():
            return []

        notes = []
        try:
            for file_path in repo_dir.glob(f"*{NOTE_SUFFIX}"):
                if not file_path.is_file():
                    continue
                with open(file_path, encoding="utf-8", newline="") as f:
                    content = f.read()
                notes.append(StoredNote(
                    file_name=file_path.name,
                    file_path=file_path,
                    content=content,
                    last_modified=datetime.fromtimestamp(file_path.stat().st_mtime),
                ))
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read notes in {repo_dir}: {e}")
            return []

        notes.sort(key=lambda n: (n.last_modified, n.file_name), reverse=True)
        return notes

    def list_repositories(self) -> list[dict]:
        """Repositories that have a note directory, with note counts."""
        if not self.notes_dir.is_dir():
            return []

        repos = []
        try:
            for item in sorted(self.notes_dir.iterdir()):
                if not item.is_dir():
                    continue
                repos.append({
                    "name": item.name,
                    "path": item,
                    "notes_count": sum(1 for _ in item.glob(f"*{NOTE_SUFFIX}")),
                    "last_updated": datetime.fromtimestamp(item.stat().st_mtime),
                })
        except OSError as e:
            logger.error(f"Failed to list repositories in {self.notes_dir}: {e}")
            return []
        return repos

    def search(
        self,
        query: str,
        repo_name: str | None = None,
        radius: int = DEFAULT_SNIPPET_RADIUS,
    ) -> list[StoredNote]:
        """
        Case-insensitive substring search.

        Args:
            query: text to look for
            repo_name: restrict to one repository (None searches all)
            radius: characters of context on each side of the match

        Returns:
            Matching notes with ``repo`` and ``snippet`` set, newest first
        """
        repos = [repo_name] if repo_name else [r["name"] for r in self.list_repositories()]
        needle = query.lower()

        results = []
        for repo in repos:
            for note in self.list(repo):
                if needle in note.content.lower():
                    note.repo = repo
                    note.snippet = extract_snippet(note.content, query, radius)
                    results.append(note)

        results.sort(key=lambda n: (n.last_modified, n.file_name), reverse=True)
        return results


def combine_notes_markdown(notes: list[StoredNote]) -> str:
    combined = "# Source Study Notes\n\n"
    for note in notes:
        combined += note.content
        combined += "\n\n---\n\n"
    return combined
