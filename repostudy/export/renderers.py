"""
Pure renderers mapping (notes, RepoInfo) to one textual export format.

Every renderer has the signature ``(notes, repo_info, ctx) -> str`` and
performs no I/O; the current time and keyword vocabulary arrive via
RenderContext so output is deterministic for fixed inputs.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from repostudy.core.models import RepoInfo, StoredNote
from repostudy.export.vocabulary import DEFAULT_VOCABULARY, KeywordVocabulary

NO_DESCRIPTION = "No description provided"


@dataclass(frozen=True)
class RenderContext:
    """Inputs shared by all renderers besides notes and repository."""

    generated_at: datetime = field(default_factory=datetime.now)
    vocabulary: KeywordVocabulary = field(default_factory=lambda: DEFAULT_VOCABULARY)

    def insights(self, notes: list[StoredNote]) -> list[str]:
        return self.vocabulary.extract_insights([n.content for n in notes])

    def highlights(self, notes: list[StoredNote]) -> list[str]:
        return self.vocabulary.extract_highlights([n.content for n in notes])


Renderer = Callable[[list[StoredNote], RepoInfo, RenderContext], str]


def _description(repo: RepoInfo) -> str:
    return repo.description or NO_DESCRIPTION


def _bullets(items: list[str]) -> str:
    return "".join(f"- {item}\n" for item in items) + "\n"


def stats_line(repo: RepoInfo) -> str:
    return (
        f"**Stats**: {repo.stats.total_files} files, {repo.stats.total_lines} lines of code, "
        f"primary language: {repo.primary_language}"
    )


# =============================================================================
# Renderers
# =============================================================================


def render_markdown(notes: list[StoredNote], repo: RepoInfo, ctx: RenderContext) -> str:
    """Plain aggregate of every note under a repository header."""
    md = f"# {repo.name} Source Study Notes\n\n"
    md += f"> Repository: [{repo.url}]({repo.url})\n\n"
    md += f"**Description**: {_description(repo)}\n\n"
    md += f"{stats_line(repo)}\n\n"

    for note in notes:
        md += note.content
        md += "\n\n---\n\n"
    return md


def render_blog(notes: list[StoredNote], repo: RepoInfo, ctx: RenderContext) -> str:
    """Blog post with a YAML front-matter metadata block."""
    title = f"{repo.name}: Source Walkthrough and Architecture Analysis"
    content = (
        "---\n"
        f'title: "{title}"\n'
        f'date: "{ctx.generated_at.strftime("%Y-%m-%d")}"\n'
        f'tags: ["source-reading", "architecture", "{repo.primary_language}", "GitHub"]\n'
        'categories: ["Engineering", "Source Reading"]\n'
        f'description: "A deep dive into the architecture, core modules and implementation of {repo.name}"\n'
        "---\n\n"
    )
    content += f"# {title}\n\n"
    content += (
        f"This post walks through the source of [{repo.name}]({repo.url}): its architecture, "
        "core implementation and the practices worth borrowing.\n\n"
    )

    content += "## Project Overview\n\n"
    content += f"- **Repository**: [{repo.url}]({repo.url})\n"
    content += f"- **Description**: {_description(repo)}\n"
    content += f"- **Stars**: {repo.stars:,}\n"
    content += f"- **Files**: {repo.stats.total_files}\n"
    content += f"- **Lines of code**: {repo.stats.total_lines:,}\n"
    content += f"- **Primary language**: {repo.primary_language}\n\n"

    content += "## Study Log\n\n"
    content += "Key takeaways from studying the project:\n\n"
    for note in notes:
        content += note.content
        content += "\n\n"

    content += "\n## Summary and Reflections\n\n"
    content += (
        f"Studying {repo.name} deepened my understanding of how {repo.primary_language} "
        "projects are structured, especially:\n\n"
    )
    content += _bullets(ctx.insights(notes))
    content += "These lessons will carry over into my own projects.\n\n"
    return content


def render_article(notes: list[StoredNote], repo: RepoInfo, ctx: RenderContext) -> str:
    """Long-form technical article."""
    article = f"# {repo.name}: A Technical Deep Dive\n\n"
    article += f"**Published**: {ctx.generated_at.strftime('%Y-%m-%d')}\n"
    article += "**Author**: repostudy source study assistant\n\n"

    article += "## Background\n\n"
    article += f"{_description(repo)}\n\n"

    article += "## Technology Stack\n\n"
    article += f"- **Primary language**: {repo.primary_language}\n"
    article += f"- **Files**: {repo.stats.total_files}\n"
    article += f"- **Lines of code**: {repo.stats.total_lines:,}\n\n"

    article += "## Architecture Walkthrough\n\n"
    for note in notes:
        article += note.content
        article += "\n\n"

    article += "## Highlights\n\n"
    for i, highlight in enumerate(ctx.highlights(notes), start=1):
        article += f"{i}. {highlight}\n"
    article += "\n"

    article += "## Study Advice\n\n"
    article += "For developers approaching a project like this:\n"
    article += "- Start from the overall architecture\n"
    article += "- Watch for design patterns in the core modules\n"
    article += "- Pay attention to code quality conventions\n\n"
    return article


def render_technical_post(notes: list[StoredNote], repo: RepoInfo, ctx: RenderContext) -> str:
    """Forum-style post."""
    post = f"# [Source Reading] {repo.name} - In Depth\n\n"
    post += f"[GitHub repository]({repo.url})\n\n"

    post += "## Overview\n\n"
    post += f"**Project**: {repo.name}\n"
    post += f"**Description**: {_description(repo)}\n"
    post += f"**Stars/Forks**: {repo.stars}/{repo.forks}\n"
    post += f"**Stack**: {repo.primary_language}\n\n"

    post += "## What I Learned\n\n"
    post += "Working through this project taught me:\n\n"
    for note in notes:
        post += note.content
        post += "\n\n"

    post += "## Why Read It\n\n"
    post += (
        f"If you are interested in {repo.primary_language} project architecture, "
        "this codebase is worth your time:\n\n"
    )
    post += _bullets(ctx.highlights(notes))

    post += "## Wrap-up\n\n"
    post += (
        f"Reading {repo.name} sharpened my {repo.primary_language} skills and, more importantly, "
        "showed how a well-designed project is put together.\n\n"
    )
    return post


def render_summary(notes: list[StoredNote], repo: RepoInfo, ctx: RenderContext) -> str:
    """Executive summary built from derived insights and highlights."""
    summary = f"# {repo.name} Study Summary\n\n"
    summary += f"**Studied**: {ctx.generated_at.strftime('%Y-%m-%d %H:%M')}\n\n"

    summary += "## Project\n\n"
    summary += f"- **Name**: {repo.name}\n"
    summary += f"- **Description**: {_description(repo)}\n"
    summary += f"- **Size**: {repo.stats.total_files} files, {repo.stats.total_lines} lines of code\n"
    summary += f"- **Language**: {repo.primary_language}\n\n"

    summary += "## Key Insights\n\n"
    summary += _bullets(ctx.insights(notes))

    summary += "## Technical Highlights\n\n"
    summary += _bullets(ctx.highlights(notes))

    summary += "## Reflection\n\n"
    summary += (
        f"Studying {repo.name} showed how much a sound architecture matters. "
        f"It is a useful reference for {repo.primary_language} development, "
        "particularly for architecture, code organization and engineering practice.\n"
    )
    return summary


def render_json(notes: list[StoredNote], repo: RepoInfo, ctx: RenderContext) -> str:
    """Machine-readable structured encoding."""
    data = {
        "repoInfo": repo.to_dict(),
        "learningNotes": [note.to_dict() for note in notes],
        "exportTime": ctx.generated_at.isoformat(),
        "totalNotes": len(notes),
    }
    return json.dumps(data, indent=2, ensure_ascii=False)


def render_newsletter(notes: list[StoredNote], repo: RepoInfo, ctx: RenderContext) -> str:
    """Short digest: stats, up to five insights and the first three notes."""
    insights = ctx.insights(notes)

    digest = f"# Tech Digest | {repo.name}\n\n"
    digest += f"*Published {ctx.generated_at.strftime('%Y-%m-%d')}*\n\n"

    digest += "## Today's Study\n\n"
    digest += f"Today's project: [{repo.name}]({repo.url}). {repo.description or 'A notable open-source project.'}\n\n"

    digest += "### By the Numbers\n\n"
    digest += f"- **Files**: {repo.stats.total_files}\n"
    digest += f"- **Lines of code**: {repo.stats.total_lines:,}\n"
    digest += f"- **Primary language**: {repo.primary_language}\n"
    digest += f"- **Stars**: {repo.stars}\n\n"

    digest += "## Focus Points\n\n"
    digest += _bullets(insights[:5])

    digest += "## Notes\n\n"
    for note in notes[:3]:
        digest += f"**{note.file_name}**:\n"
        digest += "\n".join(note.content.split("\n")[:5]) + "\n\n"

    digest += "## Takeaway\n\n"
    digest += f"Worth borrowing from {repo.name}: {', '.join(insights[:3])}.\n\n"
    return digest


def render_presentation(notes: list[StoredNote], repo: RepoInfo, ctx: RenderContext) -> str:
    """Slide outline."""
    slides = f"# {repo.name}\n"
    slides += "## Source Study and Architecture Analysis\n\n"

    slides += "### Overview\n\n"
    slides += f"- **Project**: {repo.name}\n"
    slides += f"- **Description**: {_description(repo)}\n"
    slides += f"- **Primary language**: {repo.primary_language}\n"
    slides += f"- **Size**: {repo.stats.total_files} files\n\n"

    slides += "### Study Path\n\n"
    slides += "- Project overview\n"
    slides += "- Architecture walkthrough\n"
    slides += "- Module analysis\n"
    slides += "- Implementation details\n\n"

    slides += "### Key Insights\n\n"
    slides += _bullets(ctx.insights(notes)[:5])

    slides += "### Technical Highlights\n\n"
    slides += _bullets(ctx.highlights(notes)[:5])

    slides += "### Takeaways\n\n"
    slides += f"- A clearer picture of {repo.primary_language} project architecture\n"
    slides += "- Design patterns seen in practice\n"
    slides += "- Engineering practices worth adopting\n\n"
    return slides
