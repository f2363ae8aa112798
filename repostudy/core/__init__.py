"""
Core Module - Shared domain models, errors and collaborator contracts.

Components:
- models: RepoInfo, NoteEntry, StoredNote, LearningPath, ExportArtifact
- exceptions: the error kinds raised across the package
- contracts: protocols for metadata, planning, answering and publishing
- retry: bounded exponential backoff for collaborator calls
"""

from repostudy.core.exceptions import (
    EmptyCollection,
    NotFound,
    PublishingDisabled,
    RepoStudyError,
    ResolutionError,
    SessionNotFound,
    StorageError,
    UnsupportedFormat,
)
from repostudy.core.models import (
    ExportArtifact,
    LargestFile,
    LearningPath,
    NoteEntry,
    NoteKind,
    RepoInfo,
    RepoStats,
    Step,
    StoredNote,
)

__all__ = [
    # Errors
    "RepoStudyError",
    "SessionNotFound",
    "ResolutionError",
    "UnsupportedFormat",
    "EmptyCollection",
    "NotFound",
    "StorageError",
    "PublishingDisabled",
    # Models
    "RepoInfo",
    "RepoStats",
    "LargestFile",
    "NoteEntry",
    "NoteKind",
    "StoredNote",
    "Step",
    "LearningPath",
    "ExportArtifact",
]
