"""
X.com publishing sink for learning summaries, articles and Q&A highlights.

Optional collaborator: enabled only when every X credential is configured.
Builds posts of at most 280 characters and sends them to the X v2 tweets
endpoint, signed with OAuth 1.0a user credentials.
"""

from __future__ import annotations

import re
from typing import Any

import httpx
from authlib.integrations.httpx_client import OAuth1Auth
from loguru import logger

from repostudy.core.contracts import PublishResult
from repostudy.core.exceptions import PublishingDisabled
from repostudy.core.models import NoteKind, RepoInfo, StoredNote
from repostudy.export.vocabulary import DEFAULT_VOCABULARY, KeywordVocabulary
from repostudy.notes.note_store import parse_note

MAX_POST_LENGTH = 280
REQUIRED_CREDENTIALS = ("api_key", "api_secret", "access_token", "access_secret", "bearer_token")
DEFAULT_KEY_POINTS = ("project architecture analysis", "code quality review", "implementation details")


def format_number(num: int) -> str:
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1_000:
        return f"{num / 1_000:.1f}K"
    return str(num)


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def truncate_post(text: str, max_length: int = MAX_POST_LENGTH) -> str:
    """Cut at a sentence boundary when one falls in the last 30%."""
    if len(text) <= max_length:
        return text
    truncated = text[: max_length - 3]
    last_sentence = truncated.rfind(".")
    if last_sentence > max_length * 0.7:
        return truncated[: last_sentence + 1] + "..."
    return truncated + "..."


class XPublisher:
    """Publishes study results to X.com."""

    def __init__(
        self,
        credentials: dict[str, str | None],
        api_url: str = "https://api.x.com/2",
        vocabulary: KeywordVocabulary | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ):
        self.credentials = credentials
        self.api_url = api_url.rstrip("/")
        self.vocabulary = vocabulary or DEFAULT_VOCABULARY
        self._transport = transport
        self.timeout = timeout

        missing = self.missing_credentials()
        if missing:
            logger.info(f"X publisher disabled, missing credentials: {', '.join(missing)}")

    def missing_credentials(self) -> list[str]:
        return [key for key in REQUIRED_CREDENTIALS if not self.credentials.get(key)]

    def is_enabled(self) -> bool:
        return not self.missing_credentials()

    def get_config_status(self) -> dict[str, Any]:
        missing = self.missing_credentials()
        return {
            "is_enabled": not missing,
            "has_credentials": not missing,
            "missing_fields": missing,
        }

    # =========================================================================
    # Content
    # =========================================================================

    def compose_summary(self, repo_info: RepoInfo, notes: list[StoredNote]) -> str:
        title = f"📚 Study notes: {repo_info.owner}/{repo_info.name}" if repo_info.owner else (
            f"📚 Study notes: {repo_info.name}"
        )
        text = f"{title}\n\n"
        text += f"Studied {repo_info.name} to learn {repo_info.primary_language} project architecture.\n\n"
        text += (
            f"📁 {repo_info.stats.total_files} files | "
            f"{format_number(repo_info.stats.total_lines)} lines | "
            f"⭐ {format_number(repo_info.stars)}\n\n"
        )

        insights = self.vocabulary.extract_insights([n.content for n in notes])
        text += "🔑 Key insights:\n"
        text += "".join(f"• {insight}\n" for insight in insights[:3])

        free_notes = [n for n in notes if n.file_name.startswith(NoteKind.NOTE.file_prefix + "_")]
        if free_notes:
            text += "\n💡 Notes:\n"
            for note in free_notes[:2]:
                text += f"• {truncate_text(_note_text(note), 50)}\n"

        text += f"\n#GitHub #SourceReading #{_hashtag(repo_info.primary_language)} #DevLearning"
        return truncate_post(text)

    def compose_article_post(self, repo_info: RepoInfo, article_content: str) -> str:
        """Teaser for a technical article: key points, description and link."""
        text = f"📖 Deep dive: {repo_info.name}\n\n"
        text += f"What studying the {repo_info.name} source taught me:\n\n"
        text += "".join(f"• {point}\n" for point in extract_key_points(article_content))
        if repo_info.description:
            text += f"\n{repo_info.description}\n"
        text += f"\n🔗 {repo_info.url}\n"
        text += f"#TechArticle #{_hashtag(repo_info.primary_language)} #Architecture #OpenSource"
        return truncate_post(text)

    def compose_qa_post(self, repo_info: RepoInfo, questions: list[str], answers: list[str]) -> str:
        """First two question/answer pairs; a missing answer shows as '...'."""
        text = f"❓ Source Q&A: {repo_info.name}\n\n"
        text += f"Questions that came up while studying {repo_info.name}:\n\n"
        for i, question in enumerate(questions[:2]):
            answer = answers[i] if i < len(answers) else "..."
            text += f"Q: {truncate_text(question.rstrip('?'), 30)}?\n"
            text += f"A: {truncate_text(answer, 40)}\n\n"
        text += f"#SourceQA #{_hashtag(repo_info.primary_language)} #TechLearning #Developers"
        return truncate_post(text)

    # =========================================================================
    # Publishing
    # =========================================================================

    async def publish_learning_summary(
        self,
        repo_info: RepoInfo,
        notes: list[StoredNote],
        options: dict[str, Any] | None = None,
    ) -> PublishResult:
        """
        Post a learning summary.

        API failures come back as ``success=False`` with the error text.

        Raises:
            PublishingDisabled: credentials are missing
        """
        self._require_enabled()
        options = options or {}
        text = options.get("text") or self.compose_summary(repo_info, notes)
        return await self._publish(text, options, f"learning summary for {repo_info.name}")

    async def publish_technical_article(
        self,
        repo_info: RepoInfo,
        article_content: str,
        options: dict[str, Any] | None = None,
    ) -> PublishResult:
        """
        Post a teaser for a technical article written about the repository.

        Raises:
            PublishingDisabled: credentials are missing
        """
        self._require_enabled()
        options = options or {}
        text = options.get("text") or self.compose_article_post(repo_info, article_content)
        return await self._publish(text, options, f"technical article for {repo_info.name}")

    async def publish_qa_summary(
        self,
        repo_info: RepoInfo,
        questions: list[str],
        answers: list[str],
        options: dict[str, Any] | None = None,
    ) -> PublishResult:
        """
        Post question/answer highlights.

        Raises:
            PublishingDisabled: credentials are missing
        """
        self._require_enabled()
        options = options or {}
        text = options.get("text") or self.compose_qa_post(repo_info, questions, answers)
        return await self._publish(text, options, f"Q&A summary for {repo_info.name}")

    def _require_enabled(self) -> None:
        if not self.is_enabled():
            raise PublishingDisabled("X publisher is not configured")

    def _auth(self) -> OAuth1Auth:
        # Posting needs user context: OAuth 1.0a signed with app and user keys
        return OAuth1Auth(
            client_id=self.credentials["api_key"],
            client_secret=self.credentials["api_secret"],
            token=self.credentials["access_token"],
            token_secret=self.credentials["access_secret"],
        )

    async def _publish(self, text: str, options: dict[str, Any], label: str) -> PublishResult:
        if options.get("dry_run"):
            return PublishResult(success=True, content=text)

        async with httpx.AsyncClient(
            base_url=self.api_url,
            auth=self._auth(),
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            try:
                response = await client.post("/tweets", json={"text": text})
                response.raise_for_status()
                post_id = response.json()["data"]["id"]
            except (httpx.HTTPError, KeyError, ValueError) as e:
                logger.error(f"Failed to publish {label}: {e}")
                return PublishResult(success=False, content=text, error=str(e))

        logger.info(f"Published {label}: {post_id}")
        return PublishResult(
            success=True,
            id=post_id,
            url=f"https://x.com/i/web/status/{post_id}",
            content=text,
        )


def extract_key_points(content: str, limit: int = 3) -> list[str]:
    """Short heading or bullet lines of a document, stripped of markdown markers."""
    points = []
    for line in content.split("\n"):
        if not any(marker in line for marker in "#*-"):
            continue
        clean = re.sub(r"[#*-]", "", line).strip()
        if 5 < len(clean) < 60:
            points.append(clean)
    return (points or list(DEFAULT_KEY_POINTS))[:limit]


def _hashtag(language: str) -> str:
    return "".join(ch for ch in language if ch.isalnum())


def _note_text(note: StoredNote) -> str:
    try:
        return parse_note(note.content).content
    except ValueError:
        return note.content
