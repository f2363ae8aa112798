"""
In-memory registry of learning sessions.

A SessionStore is created once per process and passed to whoever needs it.
It resolves repositories through the metadata provider, plans the learning
path, tracks the step cursor and note buffer per session, and hands
persistence to NoteStore and rendering to ExportPipeline.

Sessions are memory-only: a crash loses the in-memory buffer, but every
note was already written to NoteStore when it was added.
"""

from __future__ import annotations

import math
import secrets
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from loguru import logger

from repostudy.core.contracts import (
    AnswerGenerator,
    PathPlanner,
    PublishingSink,
    PublishResult,
    RepositoryMetadataProvider,
)
from repostudy.core.exceptions import (
    PublishingDisabled,
    SessionNotFound,
    TransientResolutionError,
)
from repostudy.core.models import (
    ExportArtifact,
    LearningPath,
    NoteEntry,
    NoteKind,
    RepoInfo,
    Step,
    StoredNote,
)
from repostudy.core.retry import retry_async
from repostudy.export.pipeline import ExportPipeline, supported_formats
from repostudy.notes.note_store import NoteStore

# Errors worth retrying for remote collaborators
TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    TransientResolutionError,
    TimeoutError,
    ConnectionError,
)


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class Session:
    """A study engagement with one repository."""

    id: str
    repo_info: RepoInfo
    learning_path: LearningPath
    notes: list[NoteEntry] = field(default_factory=list)
    cursor: int = 0
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def total_steps(self) -> int:
        return self.learning_path.total_steps

    @property
    def is_complete(self) -> bool:
        return self.cursor >= self.total_steps


@dataclass(frozen=True)
class StepProgress:
    """The step returned by ``advance`` and where it sits in the path."""

    step: Step
    position: int  # 1-based
    total: int

    @property
    def percentage(self) -> int:
        return math.floor(100 * self.position / self.total) if self.total else 0

    @property
    def message(self) -> str:
        return f"Step {self.position}/{self.total}: {self.step.title}"


@dataclass(frozen=True)
class PathCompleted:
    """Terminal marker returned once every step has been visited."""

    message: str = "Congratulations! You have completed the whole learning path."


PATH_COMPLETED = PathCompleted()


@dataclass(frozen=True)
class SessionStats:
    """Derived progress view of a session."""

    repo_info: RepoInfo
    completed_steps: int
    total_steps: int
    notes_count: int

    @property
    def percentage(self) -> int:
        if self.total_steps == 0:
            return 0
        return math.floor(100 * self.completed_steps / self.total_steps)


@dataclass(frozen=True)
class QAResult:
    """Answer to a question asked within a session."""

    entry: NoteEntry
    stored: StoredNote

    @property
    def answer(self) -> str:
        return self.entry.answer

    @property
    def related_files(self) -> tuple[str, ...]:
        return self.entry.related_files


def generate_session_id() -> str:
    return f"session_{int(time.time() * 1000)}_{secrets.token_hex(4)}"


# =============================================================================
# Session Store
# =============================================================================


class SessionStore:
    """
    Registry of live sessions plus the operations on them.

    The id -> Session map is guarded by one lock. Per-session state is
    single-writer: callers serialize operations on the same session id.
    """

    def __init__(
        self,
        metadata_provider: RepositoryMetadataProvider,
        planner: PathPlanner,
        note_store: NoteStore,
        exporter: ExportPipeline,
        answer_generator: AnswerGenerator | None = None,
        publisher: PublishingSink | None = None,
        retry_attempts: int = 3,
        retry_base_delay: float = 1.0,
    ):
        self.metadata_provider = metadata_provider
        self.planner = planner
        self.note_store = note_store
        self.exporter = exporter
        self.answer_generator = answer_generator
        self.publisher = publisher
        self.retry_attempts = retry_attempts
        self.retry_base_delay = retry_base_delay

        self._sessions: dict[str, Session] = {}
        self._issued_ids: set[str] = set()
        self._lock = threading.Lock()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def create(self, repo_locator: str) -> Session:
        """
        Start a session for a repository.

        Raises:
            ResolutionError: malformed locator or metadata fetch failure
        """
        logger.info(f"Analyzing repository: {repo_locator}")
        repo_info = await retry_async(
            lambda: self.metadata_provider.fetch(repo_locator),
            attempts=self.retry_attempts,
            base_delay=self.retry_base_delay,
            retry_on=TRANSIENT_ERRORS,
            label=f"metadata fetch for {repo_locator}",
        )
        learning_path = self.planner.plan(repo_info)

        with self._lock:
            session_id = generate_session_id()
            while session_id in self._issued_ids:
                session_id = generate_session_id()
            self._issued_ids.add(session_id)
            session = Session(id=session_id, repo_info=repo_info, learning_path=learning_path)
            self._sessions[session_id] = session

        logger.info(
            f"Session {session_id} started: {repo_info.stats.total_files} files, "
            f"{learning_path.total_steps} learning steps"
        )
        return session

    def get(self, session_id: str) -> Session:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def close(self, session_id: str) -> None:
        """Drop a session; its id is never issued again."""
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise SessionNotFound(session_id)
        logger.info(f"Session {session_id} closed")

    def session_ids(self) -> list[str]:
        with self._lock:
            return list(self._sessions)

    # =========================================================================
    # Progress
    # =========================================================================

    def advance(self, session_id: str) -> StepProgress | PathCompleted:
        """Return the step at the cursor and move on; PATH_COMPLETED once done."""
        session = self.get(session_id)
        if session.is_complete:
            return PATH_COMPLETED

        step = session.learning_path.steps[session.cursor]
        session.cursor += 1
        return StepProgress(step=step, position=session.cursor, total=session.total_steps)

    def stats(self, session_id: str) -> SessionStats:
        session = self.get(session_id)
        return SessionStats(
            repo_info=session.repo_info,
            completed_steps=session.cursor,
            total_steps=session.total_steps,
            notes_count=len(session.notes),
        )

    # =========================================================================
    # Notes
    # =========================================================================

    def add_note(self, session_id: str, content: str) -> StoredNote:
        """
        Record a free-form note and persist it.

        Raises:
            SessionNotFound: unknown session id
            StorageError: the note could not be written
        """
        session = self.get(session_id)
        entry = NoteEntry.note(content)
        stored = self.note_store.save(session.repo_info.name, entry)
        session.notes.append(entry)
        return stored

    async def add_qa(
        self,
        session_id: str,
        question: str,
        answer_generator: AnswerGenerator | None = None,
    ) -> QAResult:
        """
        Answer a question about the session's repository and persist the pair.

        Raises:
            SessionNotFound: unknown session id
            ValueError: no answer generator is available
            StorageError: the Q&A record could not be written
        """
        session = self.get(session_id)
        generator = answer_generator or self.answer_generator
        if generator is None:
            raise ValueError("No answer generator configured")

        answer = await retry_async(
            lambda: generator.answer(question, session.repo_info),
            attempts=self.retry_attempts,
            base_delay=self.retry_base_delay,
            retry_on=TRANSIENT_ERRORS,
            label="answer generation",
        )
        entry = NoteEntry.qa(question, answer.answer, answer.related_files)
        stored = self.note_store.save(session.repo_info.name, entry)
        session.notes.append(entry)
        return QAResult(entry=entry, stored=stored)

    # =========================================================================
    # Export & Publishing
    # =========================================================================

    def supported_formats(self) -> list[str]:
        return supported_formats()

    def export(self, session_id: str, format: str = "markdown") -> ExportArtifact:
        """
        Export every stored note of the session's repository.

        Raises:
            SessionNotFound: unknown session id
            UnsupportedFormat: format not in the allow-list
            StorageError: the export could not be written
        """
        session = self.get(session_id)
        notes = self.note_store.list(session.repo_info.name)
        return self.exporter.export_file(notes, session.repo_info, format)

    async def publish(self, session_id: str, options: dict[str, Any] | None = None) -> PublishResult:
        """
        Publish a learning summary through the configured sink.

        Raises:
            SessionNotFound: unknown session id
            PublishingDisabled: no sink, or the sink is not configured
        """
        session = self.get(session_id)
        publisher = self._require_publisher()

        notes = self.note_store.list(session.repo_info.name)
        return await publisher.publish_learning_summary(session.repo_info, notes, options)

    async def publish_technical_article(
        self,
        session_id: str,
        article_content: str | None = None,
        options: dict[str, Any] | None = None,
    ) -> PublishResult:
        """
        Publish a technical article teaser.

        Without ``article_content`` the stored notes are rendered in the
        ``article`` export format and that document is announced.

        Raises:
            SessionNotFound: unknown session id
            PublishingDisabled: no sink, or the sink is not configured
        """
        session = self.get(session_id)
        publisher = self._require_publisher()

        if article_content is None:
            notes = self.note_store.list(session.repo_info.name)
            article_content = self.exporter.render(notes, session.repo_info, "article")
        return await publisher.publish_technical_article(session.repo_info, article_content, options)

    async def publish_qa_summary(
        self,
        session_id: str,
        questions: list[str] | None = None,
        answers: list[str] | None = None,
        options: dict[str, Any] | None = None,
    ) -> PublishResult:
        """
        Publish question/answer highlights.

        Without ``questions`` the Q&A entries recorded in this session are used.

        Raises:
            SessionNotFound: unknown session id
            PublishingDisabled: no sink, or the sink is not configured
        """
        session = self.get(session_id)
        publisher = self._require_publisher()

        if questions is None:
            asked = [entry for entry in session.notes if entry.kind is NoteKind.QA]
            questions = [entry.question for entry in asked]
            answers = [entry.answer for entry in asked]
        return await publisher.publish_qa_summary(session.repo_info, questions, answers or [], options)

    def _require_publisher(self) -> PublishingSink:
        if self.publisher is None or not self.publisher.is_enabled():
            raise PublishingDisabled("Publishing is not configured")
        return self.publisher
