"""
Q&A helper: template answers to questions about a repository.

Questions are classified by keyword into a topic, answered from a topic
template filled with RepoInfo facts, and paired with likely related files.
No language understanding beyond keyword matching.
"""

from __future__ import annotations

import re

from loguru import logger

from repostudy.core.contracts import Answer
from repostudy.core.models import RepoInfo

QUESTION_TOPICS: dict[str, list[str]] = {
    "architecture": ["architecture", "structure", "design", "layout", "organization", "架构"],
    "functionality": ["function", "feature", "purpose", "what does", "how does", "used for", "功能"],
    "implementation": ["implement", "how to", "code", "method", "algorithm", "logic", "实现"],
    "performance": ["performance", "speed", "efficien", "optimi", "fast", "slow", "性能"],
    "security": ["security", "secure", "vulnerab", "protect", "safe", "安全"],
    "best_practice": ["best practice", "recommended", "should", "better", "improve", "最佳实践"],
    "dependency": ["dependenc", "require", "install", "package", "依赖"],
    "pattern": ["pattern", "模式"],
}

SPECIFIC_TERMS = ["specifically", "for example", "for instance", "in particular", "in detail", "in fact"]

MAX_RELATED_FILES = 5


def classify_question(question: str) -> str:
    """First topic whose keyword appears in the question, else 'general'."""
    lowered = question.lower()
    for topic, keywords in QUESTION_TOPICS.items():
        if any(keyword in lowered for keyword in keywords):
            return topic
    return "general"


class QAHelper:
    """Answers questions about a repository from topic templates."""

    async def answer(self, question: str, repo_info: RepoInfo) -> Answer:
        topic = classify_question(question)
        text = self.compose_answer(topic, repo_info)
        related = self.related_files(question, repo_info)
        logger.debug(f"Answered {topic} question about {repo_info.name} ({len(related)} related files)")
        return Answer(
            answer=text,
            related_files=related,
            question_type=topic,
            confidence=confidence_score(text),
        )

    def compose_answer(self, topic: str, repo: RepoInfo) -> str:
        lang = repo.primary_language
        stats = repo.stats
        templates = {
            "architecture": (
                f"{repo.name} follows {architecture_style(repo)}. Its {stats.total_files} files are "
                f"organized in a {_layout(repo)}; start with the top-level directories "
                f"({', '.join(stats.directories[:3]) or 'root only'}) to see how responsibilities are split."
            ),
            "functionality": (
                f"{repo.name} is described as: {repo.description or 'no description provided'}. "
                "The README and the entry points are the best place to confirm what each feature does."
            ),
            "implementation": (
                f"The implementation is mostly {lang}. For example, the largest files "
                f"({', '.join(f.path for f in stats.largest_files[:3]) or 'n/a'}) usually hold the core logic."
            ),
            "performance": (
                f"For performance, look at the hot paths in the core {lang} modules: data structures, "
                "caching and I/O boundaries. Check whether benchmarks or profiling hooks exist."
            ),
            "security": (
                f"For security, review how {repo.name} validates input, handles secrets and pins "
                "dependencies. Authentication and serialization code deserve particular attention."
            ),
            "best_practice": (
                f"{repo.name} is a useful reference for {lang} best practices: consistent structure, "
                "tests next to the code they cover and documented public interfaces."
            ),
            "dependency": (
                f"Dependencies are declared in the usual {lang} manifest "
                f"({', '.join(dependency_files(repo))}). Start there to see the third-party stack."
            ),
            "pattern": (
                f"Common patterns to look for in {repo.name} include factory, strategy and observer. "
                "Module boundaries and plugin points are where they tend to show up."
            ),
        }
        return templates.get(topic) or (
            f"{repo.name} is a {lang} project with {stats.total_files} files and "
            f"{stats.total_lines} lines of code."
        )

    def related_files(self, question: str, repo: RepoInfo) -> list[str]:
        """Largest files matching a question word, then entry-point guesses."""
        related: list[str] = []
        for keyword in re.findall(r"\w+", question.lower()):
            if len(keyword) < 3:
                continue
            matched = [f.path for f in repo.stats.largest_files if keyword in f.path.lower()]
            related.extend(matched[:3])

        if repo.stats.file_types.get(".py"):
            related += ["main.py", "__init__.py"]
        if repo.stats.file_types.get(".js") or repo.stats.file_types.get(".ts"):
            related += ["index.js", "package.json"]
        related.append("README.md")

        return list(dict.fromkeys(related))[:MAX_RELATED_FILES]


def architecture_style(repo: RepoInfo) -> str:
    langs = set(repo.languages) | {repo.primary_language}
    if langs & {"JavaScript", "TypeScript"}:
        return "a modular, component-oriented design"
    if "Python" in langs:
        return "a package-per-concern layout"
    if langs & {"Java", "Kotlin"}:
        return "a layered, object-oriented architecture"
    if "Go" in langs:
        return "small packages composed through interfaces"
    return "a modular architecture"


def dependency_files(repo: RepoInfo) -> list[str]:
    manifests = {
        "JavaScript": ["package.json"],
        "TypeScript": ["package.json", "tsconfig.json"],
        "Python": ["pyproject.toml", "requirements.txt"],
        "Java": ["pom.xml", "build.gradle"],
        "Go": ["go.mod"],
        "Rust": ["Cargo.toml"],
    }
    return manifests.get(repo.primary_language, ["the build manifest"])


def confidence_score(answer: str) -> int:
    """0-100 score from answer length (60%) and specificity (40%)."""
    length_score = min(len(answer) / 200, 1.0)
    hits = sum(1 for term in SPECIFIC_TERMS if term in answer.lower())
    specificity = min(hits / 3, 1.0)
    return round((length_score * 0.6 + specificity * 0.4) * 100)


def _layout(repo: RepoInfo) -> str:
    if any("src" in d for d in repo.stats.directories):
        return "src layout"
    return "flat layout"
