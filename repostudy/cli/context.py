"""
Wiring for CLI commands: logging setup and object construction from Settings.
"""

from __future__ import annotations

import sys

from loguru import logger

from config import Settings
from repostudy.export.pipeline import ExportPipeline
from repostudy.export.vocabulary import KeywordVocabulary
from repostudy.integrations.github_client import GithubClient
from repostudy.integrations.x_publisher import XPublisher
from repostudy.learning.path_planner import LearningPathPlanner
from repostudy.learning.qa_helper import QAHelper
from repostudy.notes.note_store import NoteStore
from repostudy.sessions.session_store import SessionStore


def configure_logging(settings: Settings, verbose: bool = False) -> None:
    """Replace loguru's default sink with the configured ones."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(
            settings.log_file,
            level="DEBUG",
            rotation="10 MB",
            retention=5,
            encoding="utf-8",
        )


def load_vocabulary(settings: Settings) -> KeywordVocabulary | None:
    if settings.vocabulary_file is None:
        return None
    logger.info(f"Loading keyword vocabulary from {settings.vocabulary_file}")
    return KeywordVocabulary.from_file(settings.vocabulary_file)


def build_note_store(settings: Settings) -> NoteStore:
    return NoteStore(settings.notes_dir)


def build_session_store(settings: Settings, github: GithubClient) -> SessionStore:
    """Assemble a SessionStore with the bundled collaborators."""
    vocabulary = load_vocabulary(settings)
    retry = settings.get_retry_config()
    if not settings.has_x_configured():
        logger.debug("X credentials incomplete, publishing disabled")
    return SessionStore(
        metadata_provider=github,
        planner=LearningPathPlanner(),
        note_store=build_note_store(settings),
        exporter=ExportPipeline(settings.export_dir, vocabulary=vocabulary),
        answer_generator=QAHelper(),
        publisher=XPublisher(
            settings.get_x_credentials(),
            api_url=settings.x_api_url,
            vocabulary=vocabulary,
            timeout=settings.http_timeout_seconds,
        ),
        retry_attempts=retry["attempts"],
        retry_base_delay=retry["base_delay"],
    )


def build_github_client(settings: Settings) -> GithubClient:
    if not settings.has_github_token():
        logger.debug("No GitHub token configured, using unauthenticated API access")
    return GithubClient(
        api_url=settings.github_api_url,
        token=settings.github_token,
        timeout=settings.http_timeout_seconds,
    )
