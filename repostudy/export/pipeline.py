"""
Export pipeline: validate a format tag, render, then write the document.

Request lifecycle:

    REQUESTED -> VALIDATING -> REJECTED (UnsupportedFormat)
                            -> RENDERING -> WRITING -> COMPLETED
                                                    -> FAILED (StorageError)

Rendering is pure; writing is the only I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable

from loguru import logger

from repostudy.core.exceptions import StorageError, UnsupportedFormat
from repostudy.core.models import ExportArtifact, RepoInfo, StoredNote
from repostudy.export import renderers
from repostudy.export.renderers import RenderContext, Renderer
from repostudy.export.vocabulary import DEFAULT_VOCABULARY, KeywordVocabulary
from repostudy.notes.note_store import sanitize_name


@dataclass(frozen=True)
class ExportFormat:
    tag: str
    renderer: Renderer
    extension: str
    description: str


# Allow-list: adding a format is one entry here
FORMATS: dict[str, ExportFormat] = {
    fmt.tag: fmt
    for fmt in (
        ExportFormat("markdown", renderers.render_markdown, ".md", "Plain aggregate of all notes"),
        ExportFormat("blog-md", renderers.render_blog, ".md", "Blog post with front matter"),
        ExportFormat("article", renderers.render_article, ".md", "Long-form technical article"),
        ExportFormat("technical-post", renderers.render_technical_post, ".md", "Forum-style post"),
        ExportFormat("summary", renderers.render_summary, ".md", "Executive summary"),
        ExportFormat("json", renderers.render_json, ".json", "Structured JSON"),
        ExportFormat("newsletter", renderers.render_newsletter, ".md", "Short digest"),
        ExportFormat("presentation", renderers.render_presentation, ".md", "Slide outline"),
    )
}

FALLBACK_EXTENSION = ".txt"


def supported_formats() -> list[str]:
    return list(FORMATS)


def export_file_name(repo_info: RepoInfo, format: str, when: datetime) -> str:
    fmt = FORMATS.get(format)
    extension = fmt.extension if fmt else FALLBACK_EXTENSION
    return f"{sanitize_name(repo_info.name)}_{format}_{when.strftime('%Y%m%d')}{extension}"


class ExportState(str, Enum):
    REQUESTED = "requested"
    VALIDATING = "validating"
    REJECTED = "rejected"
    RENDERING = "rendering"
    WRITING = "writing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ExportRequest:
    """One export attempt and the states it passed through."""

    notes: list[StoredNote]
    repo_info: RepoInfo
    format: str
    state: ExportState = ExportState.REQUESTED
    history: list[ExportState] = field(default_factory=lambda: [ExportState.REQUESTED])
    artifact: ExportArtifact | None = None
    error: str | None = None

    def transition(self, state: ExportState) -> None:
        logger.debug(f"Export {self.repo_info.name}/{self.format}: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)


class ExportPipeline:
    """Renders notes into one of FORMATS and writes the result to export_dir."""

    def __init__(
        self,
        export_dir: Path | str,
        vocabulary: KeywordVocabulary | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.export_dir = Path(export_dir)
        self.vocabulary = vocabulary or DEFAULT_VOCABULARY
        self._clock = clock

    def render(self, notes: list[StoredNote], repo_info: RepoInfo, format: str) -> str:
        """
        Render without writing.

        Raises:
            UnsupportedFormat: format is not in FORMATS
        """
        fmt = self._validate(format)
        ctx = RenderContext(generated_at=self._clock(), vocabulary=self.vocabulary)
        return fmt.renderer(notes, repo_info, ctx)

    def export_file(self, notes: list[StoredNote], repo_info: RepoInfo, format: str = "markdown") -> ExportArtifact:
        """
        Render and write an export document.

        Raises:
            UnsupportedFormat: format is not in FORMATS (nothing is written)
            StorageError: the document could not be written
        """
        request = self.submit(ExportRequest(notes=list(notes), repo_info=repo_info, format=format))
        if request.artifact is None:
            raise StorageError(f"Export of {request.format} produced no artifact")
        return request.artifact

    def submit(self, request: ExportRequest) -> ExportRequest:
        """Drive a request through its lifecycle; raises on REJECTED or FAILED."""
        request.transition(ExportState.VALIDATING)
        try:
            fmt = self._validate(request.format)
        except UnsupportedFormat as e:
            request.error = str(e)
            request.transition(ExportState.REJECTED)
            raise

        request.transition(ExportState.RENDERING)
        now = self._clock()
        ctx = RenderContext(generated_at=now, vocabulary=self.vocabulary)
        content = fmt.renderer(request.notes, request.repo_info, ctx)

        request.transition(ExportState.WRITING)
        file_name = export_file_name(request.repo_info, fmt.tag, now)
        file_path = self.export_dir / file_name
        try:
            self.export_dir.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content, encoding="utf-8")
        except OSError as e:
            request.error = str(e)
            request.transition(ExportState.FAILED)
            raise StorageError(f"Failed to write export {file_path}: {e}") from e

        request.artifact = ExportArtifact(
            format=fmt.tag,
            file_name=file_name,
            byte_length=len(content.encode("utf-8")),
            path=file_path,
        )
        request.transition(ExportState.COMPLETED)
        logger.info(f"Exported {len(request.notes)} notes as {fmt.tag}: {file_path}")
        return request

    def _validate(self, format: str) -> ExportFormat:
        fmt = FORMATS.get(format)
        if fmt is None:
            raise UnsupportedFormat(format, supported_formats())
        return fmt
