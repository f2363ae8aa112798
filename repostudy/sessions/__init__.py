"""Learning session registry and progress tracking."""

from repostudy.sessions.session_store import (
    PATH_COMPLETED,
    PathCompleted,
    QAResult,
    Session,
    SessionStats,
    SessionStore,
    StepProgress,
)

__all__ = [
    "PATH_COMPLETED",
    "PathCompleted",
    "QAResult",
    "Session",
    "SessionStats",
    "SessionStore",
    "StepProgress",
]
