"""
Unit tests for the GitHub metadata client.
"""

import base64

import httpx
import pytest
import pytest_asyncio

from repostudy.core.contracts import RepositoryMetadataProvider
from repostudy.core.exceptions import ResolutionError, TransientResolutionError
from repostudy.integrations.github_client import GithubClient, analyze_tree, parse_locator

SAMPLE_TREE = [
    {"path": "src", "type": "tree"},
    {"path": "src/app.py", "type": "blob", "size": 5000},
    {"path": "src/util.py", "type": "blob", "size": 1000},
    {"path": "README.md", "type": "blob", "size": 200},
    {"path": "Makefile", "type": "blob", "size": 120},
    {"path": "vendor/lib", "type": "commit"},
]


def github_handler(overrides=None):
    """MockTransport handler serving a small repository; overrides map path -> Response."""
    overrides = overrides or {}
    readme = base64.b64encode(b"# Demo\n\nHello").decode()
    routes = {
        "/repos/octo/demo": httpx.Response(200, json={
            "name": "demo",
            "description": "Demo project",
            "language": "Python",
            "stargazers_count": 10,
            "forks_count": 2,
            "default_branch": "trunk",
            "created_at": "2020-01-01T00:00:00Z",
            "updated_at": "2024-01-01T00:00:00Z",
        }),
        "/repos/octo/demo/git/trees/trunk": httpx.Response(200, json={"tree": SAMPLE_TREE}),
        "/repos/octo/demo/git/trees/v1": httpx.Response(200, json={"tree": SAMPLE_TREE}),
        "/repos/octo/demo/languages": httpx.Response(200, json={"Python": 6000, "Makefile": 120}),
        "/repos/octo/demo/contents/README.md": httpx.Response(200, json={"content": readme}),
    }
    routes.update(overrides)
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return routes.get(request.url.path, httpx.Response(404, json={"message": "Not Found"}))

    handler.seen = seen
    return handler


@pytest_asyncio.fixture
async def client():
    handler = github_handler()
    client = GithubClient(token="secret", transport=httpx.MockTransport(handler))
    client.handler = handler
    yield client
    await client.close()


class TestParseLocator:
    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://github.com/octo/demo", ("octo", "demo", None)),
            ("https://github.com/octo/demo/", ("octo", "demo", None)),
            ("https://github.com/octo/demo.git", ("octo", "demo", None)),
            ("github.com/octo/demo", ("octo", "demo", None)),
            ("https://github.com/octo/demo/tree/v1", ("octo", "demo", "v1")),
        ],
    )
    def test_valid(self, url, expected):
        assert parse_locator(url) == expected

    @pytest.mark.parametrize(
        "url",
        ["", "https://gitlab.com/octo/demo", "https://github.com/octo", "not a url"],
    )
    def test_invalid(self, url):
        with pytest.raises(ResolutionError):
            parse_locator(url)


class TestAnalyzeTree:
    def test_counts(self):
        stats = analyze_tree(SAMPLE_TREE)

        assert stats.total_files == 4
        assert stats.total_directories == 1
        assert stats.total_lines == 100 + 20 + 4 + 2
        assert stats.file_types == {".py": 2, ".md": 1}
        assert stats.directories == ("src",)

    def test_largest_files_sorted(self):
        stats = analyze_tree(SAMPLE_TREE)

        assert [f.path for f in stats.largest_files] == ["src/app.py", "src/util.py", "README.md", "Makefile"]
        assert stats.largest_files[0].estimated_lines == 100

    def test_main_languages(self):
        assert analyze_tree(SAMPLE_TREE).main_languages == ((".py", 2), (".md", 1))

    def test_empty_tree(self):
        stats = analyze_tree([])
        assert stats.total_files == 0
        assert stats.largest_files == ()


class TestFetch:
    @pytest.mark.asyncio
    async def test_fetch_uses_default_branch(self, client):
        info = await client.fetch("https://github.com/octo/demo")

        assert info.name == "demo"
        assert info.owner == "octo"
        assert info.ref == "trunk"
        assert info.primary_language == "Python"
        assert info.stars == 10
        assert info.stats.total_files == 4
        assert info.readme == "# Demo\n\nHello"
        assert info.languages == {"Python": 6000, "Makefile": 120}

    @pytest.mark.asyncio
    async def test_fetch_explicit_ref(self, client):
        info = await client.fetch("https://github.com/octo/demo/tree/v1")

        assert info.ref == "v1"
        readme_requests = [r for r in client.handler.seen if r.url.path.endswith("/contents/README.md")]
        assert readme_requests[0].url.params["ref"] == "v1"

    @pytest.mark.asyncio
    async def test_sends_token(self, client):
        await client.fetch("https://github.com/octo/demo")
        assert client.handler.seen[0].headers["Authorization"] == "Bearer secret"

    @pytest.mark.asyncio
    async def test_optional_endpoints_may_fail(self):
        handler = github_handler({
            "/repos/octo/demo/languages": httpx.Response(404),
            "/repos/octo/demo/contents/README.md": httpx.Response(404),
        })
        async with GithubClient(transport=httpx.MockTransport(handler)) as client:
            info = await client.fetch("https://github.com/octo/demo")

        assert info.languages == {}
        assert info.primary_language == "Python"
        assert info.readme == ""

    @pytest.mark.asyncio
    async def test_missing_repository_is_permanent(self):
        handler = github_handler({"/repos/octo/demo": httpx.Response(404)})
        async with GithubClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ResolutionError) as exc_info:
                await client.fetch("https://github.com/octo/demo")

        assert not isinstance(exc_info.value, TransientResolutionError)

    @pytest.mark.asyncio
    async def test_server_error_is_transient(self):
        handler = github_handler({"/repos/octo/demo": httpx.Response(503)})
        async with GithubClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(TransientResolutionError):
                await client.fetch("https://github.com/octo/demo")

    @pytest.mark.asyncio
    async def test_network_error_is_transient(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with GithubClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(TransientResolutionError):
                await client.fetch("https://github.com/octo/demo")

    @pytest.mark.asyncio
    async def test_malformed_url_makes_no_request(self, client):
        with pytest.raises(ResolutionError):
            await client.fetch("https://example.com/not/github")
        assert client.handler.seen == []

    def test_satisfies_provider_contract(self):
        assert isinstance(GithubClient(), RepositoryMetadataProvider)
