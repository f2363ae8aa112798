"""
Unit tests for the export pipeline, renderers and keyword vocabulary.
"""

import json
from datetime import datetime

import pytest
from pydantic import ValidationError

from repostudy.core.exceptions import StorageError, UnsupportedFormat
from repostudy.core.models import NoteEntry
from repostudy.export.pipeline import (
    FORMATS,
    ExportPipeline,
    ExportRequest,
    ExportState,
    export_file_name,
    supported_formats,
)
from repostudy.export.renderers import RenderContext, render_markdown, stats_line
from repostudy.export.vocabulary import DEFAULT_VOCABULARY, KeywordVocabulary

FIXED_NOW = datetime(2024, 3, 15, 9, 30, 0)


@pytest.fixture
def pipeline(tmp_path):
    return ExportPipeline(tmp_path / "exports", clock=lambda: FIXED_NOW)


@pytest.fixture
def stored_notes(note_store):
    note_store.save("widget", NoteEntry.note("The architecture is layered around a factory."))
    note_store.save("widget", NoteEntry.qa("Where is the engine?", "In src/core.", ["src/core/engine.ts"]))
    return note_store.list("widget")


class TestFormats:
    def test_allow_list(self):
        assert supported_formats() == [
            "markdown",
            "blog-md",
            "article",
            "technical-post",
            "summary",
            "json",
            "newsletter",
            "presentation",
        ]

    def test_extensions(self):
        assert FORMATS["json"].extension == ".json"
        assert all(FORMATS[tag].extension == ".md" for tag in supported_formats() if tag != "json")

    def test_export_file_name(self, sample_repo_info):
        assert export_file_name(sample_repo_info, "blog-md", FIXED_NOW) == "widget_blog-md_20240315.md"

    def test_export_file_name_fallback_extension(self, sample_repo_info):
        assert export_file_name(sample_repo_info, "unknown", FIXED_NOW).endswith(".txt")


class TestExportFile:
    def test_unsupported_format_writes_nothing(self, pipeline, sample_repo_info):
        with pytest.raises(UnsupportedFormat) as exc_info:
            pipeline.export_file([], sample_repo_info, "pdf")

        assert "markdown" in exc_info.value.supported
        assert not pipeline.export_dir.exists()

    def test_zero_notes_markdown(self, pipeline, sample_repo_info):
        artifact = pipeline.export_file([], sample_repo_info, "markdown")

        content = artifact.path.read_text(encoding="utf-8")
        assert artifact.file_name == "widget_markdown_20240315.md"
        assert content.startswith("# widget Source Study Notes")
        assert stats_line(sample_repo_info) in content
        assert "42 files, 3300 lines of code, primary language: TypeScript" in content

    def test_byte_length_counts_utf8(self, pipeline, sample_repo_info, note_store):
        note_store.save("widget", NoteEntry.note("naïve café ☕"))
        artifact = pipeline.export_file(note_store.list("widget"), sample_repo_info, "markdown")

        assert artifact.byte_length == len(artifact.path.read_bytes())

    @pytest.mark.parametrize("tag", supported_formats())
    def test_every_format_renders(self, pipeline, sample_repo_info, stored_notes, tag):
        artifact = pipeline.export_file(stored_notes, sample_repo_info, tag)

        assert artifact.format == tag
        assert artifact.path.exists()
        assert "widget" in artifact.path.read_text(encoding="utf-8")

    def test_json_structure(self, pipeline, sample_repo_info, stored_notes):
        artifact = pipeline.export_file(stored_notes, sample_repo_info, "json")
        data = json.loads(artifact.path.read_text(encoding="utf-8"))

        assert data["totalNotes"] == 2
        assert data["repoInfo"]["name"] == "widget"
        assert data["repoInfo"]["stats"]["totalFiles"] == 42
        assert data["exportTime"] == FIXED_NOW.isoformat()
        assert len(data["learningNotes"]) == 2

    def test_write_failure_raises_storage_error(self, tmp_path, sample_repo_info):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        pipeline = ExportPipeline(blocker / "exports", clock=lambda: FIXED_NOW)

        with pytest.raises(StorageError):
            pipeline.export_file([], sample_repo_info, "markdown")


class TestExportRequest:
    def test_completed_history(self, pipeline, sample_repo_info):
        request = pipeline.submit(ExportRequest(notes=[], repo_info=sample_repo_info, format="summary"))

        assert request.state is ExportState.COMPLETED
        assert request.history == [
            ExportState.REQUESTED,
            ExportState.VALIDATING,
            ExportState.RENDERING,
            ExportState.WRITING,
            ExportState.COMPLETED,
        ]
        assert request.artifact is not None

    def test_rejected_history(self, pipeline, sample_repo_info):
        request = ExportRequest(notes=[], repo_info=sample_repo_info, format="docx")

        with pytest.raises(UnsupportedFormat):
            pipeline.submit(request)

        assert request.state is ExportState.REJECTED
        assert request.history == [ExportState.REQUESTED, ExportState.VALIDATING, ExportState.REJECTED]
        assert "docx" in request.error


class TestRenderers:
    def test_render_is_deterministic(self, pipeline, sample_repo_info, stored_notes):
        first = pipeline.render(stored_notes, sample_repo_info, "blog-md")
        second = pipeline.render(stored_notes, sample_repo_info, "blog-md")
        assert first == second

    def test_blog_front_matter(self, pipeline, sample_repo_info):
        content = pipeline.render([], sample_repo_info, "blog-md")

        assert content.startswith("---\n")
        assert 'date: "2024-03-15"' in content

    def test_insights_fall_back_without_keywords(self, pipeline, sample_repo_info):
        content = pipeline.render([], sample_repo_info, "summary")

        for phrase in DEFAULT_VOCABULARY.insight_fallbacks:
            assert phrase in content

    def test_insights_from_keywords(self, pipeline, sample_repo_info, stored_notes):
        content = pipeline.render(stored_notes, sample_repo_info, "summary")

        assert "architectural design approach" in content
        assert "factory pattern implementation" in content

    def test_missing_description_placeholder(self, sample_repo_info):
        from dataclasses import replace

        repo = replace(sample_repo_info, description=None)
        content = render_markdown([], repo, RenderContext(generated_at=FIXED_NOW))

        assert "No description provided" in content

    def test_context_defaults_to_shared_vocabulary(self):
        assert RenderContext().vocabulary is DEFAULT_VOCABULARY


class TestKeywordVocabulary:
    def test_dedupes_in_first_hit_order(self):
        vocab = KeywordVocabulary()
        phrases = vocab.extract_insights(["Component first", "then ARCHITECTURE", "component again"])

        assert phrases == ["modular design", "architectural design approach"]

    def test_highlight_fallbacks(self):
        assert KeywordVocabulary().extract_highlights(["nothing relevant"]) == [
            "clean code structure",
            "clear module boundaries",
            "consistent naming conventions",
        ]

    def test_from_file_overrides_tables(self, tmp_path):
        path = tmp_path / "vocab.json"
        path.write_text(json.dumps({"insights": {"router": "routing design"}}), encoding="utf-8")

        vocab = KeywordVocabulary.from_file(path)

        assert vocab.extract_insights(["the router"]) == ["routing design"]
        assert vocab.highlights == DEFAULT_VOCABULARY.highlights

    def test_custom_vocabulary_reaches_renderers(self, tmp_path, sample_repo_info):
        vocab = KeywordVocabulary(insight_fallbacks=["custom fallback"])
        pipeline = ExportPipeline(tmp_path, vocabulary=vocab, clock=lambda: FIXED_NOW)

        assert "custom fallback" in pipeline.render([], sample_repo_info, "summary")

    def test_vocabulary_is_immutable(self):
        with pytest.raises(ValidationError):
            DEFAULT_VOCABULARY.insight_fallbacks = ["changed"]
        assert DEFAULT_VOCABULARY.insight_fallbacks[0] == "overall project architecture"
