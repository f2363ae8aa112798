"""
Integration Tests for the Study Flow.

Tests the whole learning loop against a mocked GitHub API:
1. GithubClient resolves the repository
2. SessionStore plans the path and tracks progress
3. NoteStore persists notes and Q&A records as they are added
4. ExportPipeline and the batch export render what was stored
"""

import base64
import json

import httpx
import pytest
import pytest_asyncio

from repostudy.export.pipeline import ExportPipeline, supported_formats
from repostudy.integrations.github_client import GithubClient
from repostudy.learning.path_planner import LearningPathPlanner
from repostudy.learning.qa_helper import QAHelper
from repostudy.notes.note_store import NoteStore, parse_note
from repostudy.sessions.session_store import PATH_COMPLETED, SessionStore

pytestmark = pytest.mark.integration

REPO_URL = "https://github.com/octo/hello-world"


def github_api(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/repos/octo/hello-world":
        return httpx.Response(200, json={
            "name": "hello-world",
            "description": "My first repository",
            "language": "Python",
            "stargazers_count": 2500,
            "forks_count": 300,
            "default_branch": "main",
        })
    if path == "/repos/octo/hello-world/git/trees/main":
        return httpx.Response(200, json={"tree": [
            {"path": "hello", "type": "tree"},
            {"path": "hello/__init__.py", "type": "blob", "size": 100},
            {"path": "hello/core.py", "type": "blob", "size": 25000},
            {"path": "hello/factory.py", "type": "blob", "size": 8000},
            {"path": "tests/test_core.py", "type": "blob", "size": 4000},
            {"path": "README.md", "type": "blob", "size": 900},
        ]})
    if path == "/repos/octo/hello-world/languages":
        return httpx.Response(200, json={"Python": 37100})
    if path == "/repos/octo/hello-world/contents/README.md":
        return httpx.Response(200, json={"content": base64.b64encode(b"# hello-world").decode()})
    return httpx.Response(404)


@pytest_asyncio.fixture
async def study_env(tmp_path):
    github = GithubClient(transport=httpx.MockTransport(github_api))
    note_store = NoteStore(tmp_path / "notes")
    store = SessionStore(
        metadata_provider=github,
        planner=LearningPathPlanner(),
        note_store=note_store,
        exporter=ExportPipeline(tmp_path / "exports"),
        answer_generator=QAHelper(),
        retry_base_delay=0,
    )
    yield store, note_store
    await github.close()


class TestStudyFlow:
    @pytest.mark.asyncio
    async def test_full_session(self, study_env):
        store, note_store = study_env

        session = await store.create(REPO_URL)
        assert session.repo_info.primary_language == "Python"
        assert session.repo_info.stats.total_files == 5
        assert session.learning_path.prerequisites[1] == "Python fundamentals"

        first = store.advance(session.id)
        assert first.step.id == "overview"
        assert "2500" in first.step.content

        store.add_note(session.id, "The factory module builds every handler.")
        qa = await store.add_qa(session.id, "Where is the core logic implemented?")
        assert "hello/core.py" in qa.related_files

        stored = note_store.list("hello-world")
        assert len(stored) == 2
        parsed = sorted((parse_note(n.content) for n in stored), key=lambda e: e.kind.value)
        assert parsed[0].content == "The factory module builds every handler."
        assert parsed[1].question == "Where is the core logic implemented?"

        for _ in range(6):
            store.advance(session.id)
        assert store.advance(session.id) is PATH_COMPLETED
        assert store.stats(session.id).percentage == 100

        store.close(session.id)
        assert store.session_ids() == []

    @pytest.mark.asyncio
    async def test_exports_after_session(self, study_env):
        store, note_store = study_env
        session = await store.create(REPO_URL)
        store.add_note(session.id, "Uses a factory for plugins.")

        artifacts = [store.export(session.id, tag) for tag in supported_formats()]
        assert len({a.file_name for a in artifacts}) == len(artifacts)

        json_artifact = next(a for a in artifacts if a.format == "json")
        data = json.loads(json_artifact.path.read_text(encoding="utf-8"))
        assert data["repoInfo"]["stars"] == 2500
        assert data["totalNotes"] == 1

        summary = next(a for a in artifacts if a.format == "summary")
        assert "factory pattern implementation" in summary.path.read_text(encoding="utf-8")

        batch = note_store.export_all("hello-world", "json")
        assert json.loads(batch.path.read_text(encoding="utf-8"))[0]["content"].startswith("# Learning Note")

    @pytest.mark.asyncio
    async def test_notes_survive_session_close(self, study_env):
        store, note_store = study_env
        session = await store.create(REPO_URL)
        store.add_note(session.id, "persisted immediately")
        store.close(session.id)

        results = note_store.search("persisted")
        assert len(results) == 1
        assert results[0].repo == "hello-world"
