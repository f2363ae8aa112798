"""
GitHub repository metadata provider.

Resolves ``https://github.com/{owner}/{repo}[/tree/{ref}]`` into a RepoInfo
snapshot using the GitHub REST API.

Usage:
    async with GithubClient(token=settings.github_token) as client:
        repo_info = await client.fetch("https://github.com/pallets/flask")
"""

from __future__ import annotations

import base64
import posixpath
import re
from collections import Counter
from typing import Any

import httpx
from loguru import logger

from repostudy.core.exceptions import ResolutionError, TransientResolutionError
from repostudy.core.models import LargestFile, RepoInfo, RepoStats

GITHUB_URL_PATTERN = re.compile(
    r"^(?:https?://)?(?:www\.)?github\.com/"
    r"(?P<owner>[A-Za-z0-9_.-]+)/(?P<repo>[A-Za-z0-9_.-]+?)(?:\.git)?"
    r"(?:/tree/(?P<ref>[^/?#]+))?/?$"
)

BYTES_PER_LINE = 50
LARGEST_FILES_LIMIT = 10
MAIN_LANGUAGES_LIMIT = 5


def parse_locator(url: str) -> tuple[str, str, str | None]:
    """
    Split a GitHub URL into (owner, repo, ref).

    Raises:
        ResolutionError: the URL is not a GitHub repository URL
    """
    match = GITHUB_URL_PATTERN.match(url.strip())
    if not match:
        raise ResolutionError(f"Invalid GitHub URL format: {url}")
    return match.group("owner"), match.group("repo"), match.group("ref")


def analyze_tree(tree: list[dict[str, Any]]) -> RepoStats:
    """Derive RepoStats from a recursive git tree listing."""
    total_files = 0
    total_dirs = 0
    total_lines = 0
    file_types: Counter[str] = Counter()
    directories: set[str] = set()
    files: list[LargestFile] = []

    for item in tree:
        if item.get("type") == "tree":
            total_dirs += 1
            continue
        if item.get("type") != "blob":
            continue

        path = item.get("path", "")
        size = int(item.get("size") or 0)
        total_files += 1

        ext = posixpath.splitext(path)[1].lower()
        if ext:
            file_types[ext] += 1

        parent = posixpath.dirname(path)
        if parent:
            directories.add(parent)

        # Line count is estimated from size; fetching every blob is too costly
        estimated = size // BYTES_PER_LINE
        total_lines += estimated
        files.append(LargestFile(path=path, size=size, estimated_lines=estimated))

    files.sort(key=lambda f: f.size, reverse=True)
    return RepoStats(
        total_files=total_files,
        total_lines=total_lines,
        total_directories=total_dirs,
        file_types=dict(file_types),
        directories=tuple(sorted(directories)),
        largest_files=tuple(files[:LARGEST_FILES_LIMIT]),
        main_languages=tuple(file_types.most_common(MAIN_LANGUAGES_LIMIT)),
    )


class GithubClient:
    """
    HTTP client for the GitHub REST API.

    Supports:
    - Optional token authentication
    - Repository details, recursive tree, languages and README
    - Transient failures (timeouts, 5xx) reported as TransientResolutionError
    """

    def __init__(
        self,
        api_url: str = "https://api.github.com",
        token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> GithubClient:
        self._ensure_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Accept": "application/vnd.github+json"}
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.AsyncClient(
                base_url=self.api_url,
                headers=headers,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # =========================================================================
    # Metadata
    # =========================================================================

    async def fetch(self, locator: str) -> RepoInfo:
        """
        Resolve a repository URL into RepoInfo.

        Raises:
            ResolutionError: malformed URL or a permanent API failure
            TransientResolutionError: timeout, network error or 5xx response
        """
        owner, repo, ref = parse_locator(locator)
        logger.info(f"Resolving repository {owner}/{repo}")

        details = await self._get_json(f"/repos/{owner}/{repo}")
        ref = ref or details.get("default_branch") or "main"
        tree = await self._get_json(f"/repos/{owner}/{repo}/git/trees/{ref}", params={"recursive": "1"})
        languages = await self._get_optional(f"/repos/{owner}/{repo}/languages") or {}
        readme = await self._get_readme(owner, repo, ref)

        stats = analyze_tree(tree.get("tree", []))
        if tree.get("truncated"):
            logger.warning(f"Tree listing for {owner}/{repo} was truncated; stats are partial")

        primary = next(iter(languages), None) or details.get("language") or "Unknown"
        return RepoInfo(
            url=locator,
            owner=owner,
            name=details.get("name", repo),
            description=details.get("description"),
            stats=stats,
            primary_language=primary,
            stars=details.get("stargazers_count", 0),
            forks=details.get("forks_count", 0),
            ref=ref,
            languages=dict(languages),
            readme=readme,
            created_at=details.get("created_at"),
            updated_at=details.get("updated_at"),
        )

    async def _get_json(self, path: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        client = self._ensure_client()
        try:
            response = await client.get(path, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status >= 500:
                raise TransientResolutionError(f"GitHub server error {status} for {path}") from e
            raise ResolutionError(f"GitHub returned {status} for {path}") from e
        except httpx.RequestError as e:
            raise TransientResolutionError(f"GitHub request failed for {path}: {e}") from e

    async def _get_optional(self, path: str, params: dict[str, str] | None = None) -> dict[str, Any] | None:
        try:
            return await self._get_json(path, params=params)
        except ResolutionError as e:
            logger.warning(f"Optional metadata unavailable: {e}")
            return None

    async def _get_readme(self, owner: str, repo: str, ref: str) -> str:
        data = await self._get_optional(f"/repos/{owner}/{repo}/contents/README.md", params={"ref": ref})
        if not data or not data.get("content"):
            return ""
        try:
            return base64.b64decode(data["content"]).decode("utf-8", errors="replace")
        except ValueError:
            logger.warning(f"README for {owner}/{repo} is not valid base64")
            return ""
