"""
Collaborator contracts consumed by the session store.

Bundled implementations:
- RepositoryMetadataProvider -> repostudy.integrations.github_client.GithubClient
- LearningPathPlanner -> repostudy.learning.path_planner.LearningPathPlanner
- AnswerGenerator -> repostudy.learning.qa_helper.QAHelper
- PublishingSink -> repostudy.integrations.x_publisher.XPublisher
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from repostudy.core.models import LearningPath, RepoInfo, StoredNote


@dataclass
class Answer:
    """Answer produced for a question about a repository."""

    answer: str
    related_files: list[str] = field(default_factory=list)
    question_type: str = "general"
    confidence: int = 0


@dataclass
class PublishResult:
    """Outcome of publishing a post."""

    success: bool
    id: str | None = None
    url: str | None = None
    content: str = ""
    error: str | None = None


@runtime_checkable
class RepositoryMetadataProvider(Protocol):
    async def fetch(self, locator: str) -> RepoInfo: ...


@runtime_checkable
class PathPlanner(Protocol):
    def plan(self, repo_info: RepoInfo) -> LearningPath: ...


@runtime_checkable
class AnswerGenerator(Protocol):
    async def answer(self, question: str, repo_info: RepoInfo) -> Answer: ...


@runtime_checkable
class PublishingSink(Protocol):
    def is_enabled(self) -> bool: ...

    async def publish_learning_summary(
        self,
        repo_info: RepoInfo,
        notes: list[StoredNote],
        options: dict[str, Any] | None = None,
    ) -> PublishResult: ...

    async def publish_technical_article(
        self,
        repo_info: RepoInfo,
        article_content: str,
        options: dict[str, Any] | None = None,
    ) -> PublishResult: ...

    async def publish_qa_summary(
        self,
        repo_info: RepoInfo,
        questions: list[str],
        answers: list[str],
        options: dict[str, Any] | None = None,
    ) -> PublishResult: ...
