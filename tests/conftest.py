"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from repostudy.core.contracts import PublishResult  # noqa: E402
from repostudy.core.exceptions import TransientResolutionError  # noqa: E402
from repostudy.core.models import LargestFile, RepoInfo, RepoStats  # noqa: E402
from repostudy.export.pipeline import ExportPipeline  # noqa: E402
from repostudy.learning.path_planner import LearningPathPlanner  # noqa: E402
from repostudy.learning.qa_helper import QAHelper  # noqa: E402
from repostudy.notes.note_store import NoteStore  # noqa: E402
from repostudy.sessions.session_store import SessionStore  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (mocked HTTP, real filesystem)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


# =============================================================================
# Test Doubles
# =============================================================================


class FakeMetadataProvider:
    """Metadata provider returning a fixed RepoInfo, optionally failing first."""

    def __init__(self, repo_info: RepoInfo, failures: list[Exception] | None = None):
        self.repo_info = repo_info
        self.failures = list(failures or [])
        self.calls = 0
        self.closed = False

    async def fetch(self, locator: str) -> RepoInfo:
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return self.repo_info

    async def close(self) -> None:
        self.closed = True


class FakePublisher:
    """Publishing sink that records what it was asked to publish."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.published = []
        self.articles = []
        self.qa_summaries = []

    def is_enabled(self) -> bool:
        return self.enabled

    async def publish_learning_summary(self, repo_info, notes, options=None):
        self.published.append((repo_info, list(notes), options))
        return PublishResult(success=True, id="1", url="https://x.com/i/web/status/1", content="summary")

    async def publish_technical_article(self, repo_info, article_content, options=None):
        self.articles.append((repo_info, article_content, options))
        return PublishResult(success=True, id="2", content="article")

    async def publish_qa_summary(self, repo_info, questions, answers, options=None):
        self.qa_summaries.append((repo_info, list(questions), list(answers), options))
        return PublishResult(success=True, id="3", content="qa")


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def sample_repo_info():
    """A mid-sized TypeScript repository."""
    return RepoInfo(
        url="https://github.com/acme/widget",
        owner="acme",
        name="widget",
        description="A small widget toolkit",
        stats=RepoStats(
            total_files=42,
            total_lines=3300,
            total_directories=4,
            file_types={".ts": 30, ".json": 8, ".md": 4},
            directories=("docs", "src", "src/core", "test"),
            largest_files=(
                LargestFile(path="src/core/engine.ts", size=40000, estimated_lines=800),
                LargestFile(path="src/core/factory.ts", size=20000, estimated_lines=400),
                LargestFile(path="src/index.ts", size=5000, estimated_lines=100),
            ),
            main_languages=((".ts", 30), (".json", 8), (".md", 4)),
        ),
        primary_language="TypeScript",
        stars=1234,
        forks=56,
    )


@pytest.fixture
def note_store(tmp_path):
    """NoteStore rooted in a temporary directory."""
    return NoteStore(tmp_path / "learning-notes")


@pytest.fixture
def export_pipeline(tmp_path):
    """ExportPipeline writing into a temporary directory."""
    return ExportPipeline(tmp_path / "exports")


@pytest.fixture
def metadata_provider(sample_repo_info):
    return FakeMetadataProvider(sample_repo_info)


@pytest.fixture
def flaky_provider(sample_repo_info):
    """Provider failing twice with transient errors before succeeding."""
    return FakeMetadataProvider(
        sample_repo_info,
        failures=[TransientResolutionError("timeout"), TransientResolutionError("502")],
    )


@pytest.fixture
def session_store(metadata_provider, note_store, export_pipeline):
    """SessionStore wired with in-memory fakes and temporary directories."""
    return SessionStore(
        metadata_provider=metadata_provider,
        planner=LearningPathPlanner(),
        note_store=note_store,
        exporter=export_pipeline,
        answer_generator=QAHelper(),
        retry_attempts=3,
        retry_base_delay=0,
    )


@pytest.fixture
def fake_publisher():
    return FakePublisher()
