"""
Domain models shared by the session, note and export layers.

- RepoInfo / RepoStats: snapshot of an external repository
- NoteEntry: one atomic learning artifact (free note or Q&A pair)
- StoredNote: the durable, rendered counterpart of a NoteEntry
- Step / LearningPath: the ordered study plan for a repository
- ExportArtifact: result of writing an export document
"""

from __future__ import annotations

import secrets
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any


# =============================================================================
# Repository Metadata
# =============================================================================


@dataclass(frozen=True)
class LargestFile:
    """A single entry in the largest-files ranking."""

    path: str
    size: int
    estimated_lines: int


@dataclass(frozen=True)
class RepoStats:
    """Aggregate statistics derived from a repository tree."""

    total_files: int = 0
    total_lines: int = 0
    total_directories: int = 0
    file_types: dict[str, int] = field(default_factory=dict)
    directories: tuple[str, ...] = ()
    largest_files: tuple[LargestFile, ...] = ()
    main_languages: tuple[tuple[str, int], ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalFiles": self.total_files,
            "totalLines": self.total_lines,
            "totalDirectories": self.total_directories,
            "fileTypes": dict(self.file_types),
            "directories": list(self.directories),
            "largestFiles": [asdict(f) for f in self.largest_files],
            "mainLanguages": [{"ext": ext, "count": count} for ext, count in self.main_languages],
        }


@dataclass(frozen=True)
class RepoInfo:
    """Immutable snapshot of an external repository's metadata."""

    url: str
    owner: str
    name: str
    description: str | None = None
    stats: RepoStats = field(default_factory=RepoStats)
    primary_language: str = "Unknown"
    stars: int = 0
    forks: int = 0
    ref: str = "main"
    languages: dict[str, int] = field(default_factory=dict)
    readme: str = ""
    created_at: str | None = None
    updated_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Structured form used by the JSON export."""
        return {
            "name": self.name,
            "owner": self.owner,
            "url": self.url,
            "description": self.description,
            "stats": self.stats.to_dict(),
            "primaryLanguage": self.primary_language,
            "stars": self.stars,
            "forks": self.forks,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


# =============================================================================
# Notes
# =============================================================================


class NoteKind(str, Enum):
    """Kinds of learning artifacts."""

    NOTE = "note"
    QA = "qa"

    @property
    def file_prefix(self) -> str:
        return "QA" if self is NoteKind.QA else "NOTE"


def generate_id() -> str:
    """Random 128-bit identifier as 32 hex characters."""
    return secrets.token_hex(16)


@dataclass(frozen=True)
class NoteEntry:
    """
    One learning artifact captured during a session.

    Free notes carry ``content``; Q&A entries carry ``question``,
    ``answer`` and ``related_files``.
    """

    kind: NoteKind
    id: str = field(default_factory=generate_id)
    timestamp: datetime = field(default_factory=lambda: datetime.now().astimezone())
    content: str = ""
    question: str = ""
    answer: str = ""
    related_files: tuple[str, ...] = ()

    @classmethod
    def note(cls, content: str) -> NoteEntry:
        return cls(kind=NoteKind.NOTE, content=content)

    @classmethod
    def qa(cls, question: str, answer: str, related_files: list[str] | tuple[str, ...] = ()) -> NoteEntry:
        return cls(
            kind=NoteKind.QA,
            question=question,
            answer=answer,
            related_files=tuple(related_files),
        )


@dataclass
class StoredNote:
    """A note file as found on disk."""

    file_name: str
    file_path: Path
    content: str
    last_modified: datetime
    repo: str | None = None
    snippet: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = {
            "fileName": self.file_name,
            "filePath": str(self.file_path),
            "content": self.content,
            "lastModified": self.last_modified.isoformat(),
        }
        if self.repo is not None:
            data["repo"] = self.repo
        return data


# =============================================================================
# Learning Path
# =============================================================================


@dataclass(frozen=True)
class Step:
    """A single stage of a learning path."""

    id: str
    title: str
    description: str
    content: str
    level: str = ""
    estimated_minutes: int = 30


@dataclass(frozen=True)
class LearningPath:
    """Ordered study plan for one repository."""

    repo: str
    steps: tuple[Step, ...]
    difficulty: str = ""
    prerequisites: tuple[str, ...] = ()

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    @property
    def estimated_total(self) -> str:
        minutes = sum(step.estimated_minutes for step in self.steps)
        return f"{minutes // 60}h {minutes % 60}m"


# =============================================================================
# Export
# =============================================================================


@dataclass(frozen=True)
class ExportArtifact:
    """A written export document."""

    format: str
    file_name: str
    byte_length: int
    path: Path
