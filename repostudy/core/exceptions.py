"""
Error kinds raised by the session, note and export layers.

Local validation errors (bad format tag, unknown session id) are raised
before any side effect. Write failures surface as StorageError; read paths
degrade to empty results instead of raising.
"""

from __future__ import annotations


class RepoStudyError(Exception):
    """Base class for all repostudy errors."""

    pass


class SessionNotFound(RepoStudyError, LookupError):
    """Raised when a session id is not in the registry."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Unknown learning session: {session_id}")


class ResolutionError(RepoStudyError):
    """Raised when a repository locator cannot be resolved to RepoInfo."""

    pass


class UnsupportedFormat(RepoStudyError, ValueError):
    """Raised when an export format tag is not in the allow-list."""

    def __init__(self, format_tag: str, supported: list[str] | tuple[str, ...]):
        self.format_tag = format_tag
        self.supported = list(supported)
        super().__init__(
            f"Unsupported export format: {format_tag}. "
            f"Supported formats: {', '.join(self.supported)}"
        )


class EmptyCollection(RepoStudyError):
    """Raised when a batch export is requested for a repository with no notes."""

    def __init__(self, repo_name: str):
        self.repo_name = repo_name
        super().__init__(f"No notes saved for repository: {repo_name}")


class NotFound(RepoStudyError, LookupError):
    """Raised when a stored note file does not exist."""

    pass


class StorageError(RepoStudyError, OSError):
    """Raised when a local write (save, delete, export) fails."""

    pass


class PublishingDisabled(RepoStudyError):
    """Raised when publishing is requested but no sink is configured."""

    pass


class TransientResolutionError(ResolutionError):
    """Resolution failure that may succeed on retry (timeout, 5xx, network)."""

    pass
