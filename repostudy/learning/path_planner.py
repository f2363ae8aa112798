"""
Learning path planner.

Builds a fixed seven-stage path that moves from the big picture to the
details: overview -> architecture -> modules -> components -> patterns ->
deep dive -> summary. Content is template-driven from RepoInfo, so the
same RepoInfo always yields the same path.
"""

from __future__ import annotations

from repostudy.core.models import LearningPath, RepoInfo, Step

COMMON_ROOT_FILES = [
    "README.md", "package.json", "requirements.txt", "Dockerfile",
    "Makefile", "setup.py", "pom.xml", "build.gradle",
]


class LearningPathPlanner:
    """Template-based planner keyed by repository size and language."""

    def plan(self, repo_info: RepoInfo) -> LearningPath:
        steps = (
            Step(
                id="overview",
                title="Project Overview",
                description="Basic facts, goals and core features of the project",
                content=self._overview(repo_info),
                level="overview",
                estimated_minutes=15,
            ),
            Step(
                id="architecture",
                title="Architecture Analysis",
                description="Overall architecture and how the core components relate",
                content=self._architecture(repo_info),
                level="architecture",
                estimated_minutes=30,
            ),
            Step(
                id="modules",
                title="Module Analysis",
                description="Design and implementation of the core modules",
                content=self._modules(repo_info),
                level="module",
                estimated_minutes=45,
            ),
            Step(
                id="components",
                title="Component Deep Read",
                description="Implementation details and patterns of key components",
                content=self._components(repo_info),
                level="component",
                estimated_minutes=60,
            ),
            Step(
                id="patterns",
                title="Design Patterns and Best Practices",
                description="Patterns and engineering practices used in the project",
                content=self._patterns(repo_info),
                level="pattern",
                estimated_minutes=40,
            ),
            Step(
                id="deep-dive",
                title="Deep Dive",
                description="Focused study of a feature or module of your choice",
                content=self._deep_dive(repo_info),
                level="deep-dive",
                estimated_minutes=90,
            ),
            Step(
                id="summary",
                title="Summary and Reflection",
                description="Consolidate what you learned and suggest improvements",
                content=self._summary(repo_info),
                level="summary",
                estimated_minutes=30,
            ),
        )
        return LearningPath(
            repo=repo_info.name,
            steps=steps,
            difficulty=estimate_difficulty(repo_info),
            prerequisites=tuple(prerequisites_for(repo_info)),
        )

    # =========================================================================
    # Step content
    # =========================================================================

    def _overview(self, repo: RepoInfo) -> str:
        return _section(
            f"Let's start exploring **{repo.name}**!",
            [
                f"**Description**: {repo.description or 'No description provided'}",
                f"**Stars**: {repo.stars} | **Forks**: {repo.forks}",
                f"**Primary language**: {repo.primary_language}",
                f"**Total files**: {repo.stats.total_files}",
                f"**Lines of code**: {repo.stats.total_lines}",
            ],
            questions=[
                "What is the overall goal of the project?",
                "What problem does it solve?",
                "What is its core value proposition?",
                "Which key features does the README call out?",
            ],
            activities=[
                "Read the README carefully",
                "Check the contribution guide",
                "Look up the license",
            ],
        )

    def _architecture(self, repo: RepoInfo) -> str:
        directories = ", ".join(repo.stats.directories[:5]) or "(none)"
        return _section(
            "Now let's look at the overall architecture.",
            [
                "**Directory structure**:",
                f"- Notable root files: {', '.join(main_files(repo))}",
                f"- Main directories: {directories}",
                f"- Layout: {project_structure(repo)}",
                f"- Likely entry points: {', '.join(entry_points(repo)) or 'unknown'}",
            ],
            questions=[
                "Which architectural style does the project follow?",
                "How do the core components interact?",
                "Is there a clear layering?",
                "How are dependencies managed?",
            ],
            activities=[
                "Sketch an architecture diagram",
                "Locate the entry points",
                "Map the dependency graph",
            ],
        )

    def _modules(self, repo: RepoInfo) -> str:
        top_types = ", ".join(f"{ext} ({count})" for ext, count in repo.stats.main_languages) or "n/a"
        return _section(
            "Next, analyse the core modules.",
            [
                "**Module analysis**:",
                f"- File types by frequency: {top_types}",
                "- Identify the core, utility and configuration modules",
                "**Focus areas**: core algorithms, performance-critical paths, complex business logic",
            ],
            questions=[
                "Which module is the heart of the project?",
                "How tightly coupled are the modules?",
                "Are there circular dependencies?",
                "Does each module have a single responsibility?",
            ],
            activities=[
                "Read the core module source",
                "Draw the module relationships",
                "Review the module interfaces",
            ],
        )

    def _components(self, repo: RepoInfo) -> str:
        largest = [f"- {f.path} (~{f.estimated_lines} lines)" for f in repo.stats.largest_files[:5]]
        return _section(
            "Let's study how the key components are implemented.",
            ["**Largest files (good starting points)**:", *(largest or ["- (no file data)"])],
            questions=[
                "Which design patterns do the components use?",
                "How readable and maintainable is the code?",
                "Are there optimization opportunities?",
                "Is error handling thorough?",
            ],
            activities=[
                "Read a key component line by line",
                "Spot the design patterns in use",
                "Assess code quality",
            ],
        )

    def _patterns(self, repo: RepoInfo) -> str:
        return _section(
            "Identify the design patterns and best practices in the project.",
            [
                "**Patterns to look for**: factory, strategy, decorator, observer",
                "**Practices to look for**: linting rules, test coverage, API documentation",
            ],
            questions=[
                "Which coding standards does the project follow?",
                "How good is the test coverage?",
                "How good is the documentation?",
                "What does the review process look like?",
            ],
            activities=[
                "List the design patterns you found",
                "Summarize the best practices",
                "Note possible improvements",
            ],
        )

    def _deep_dive(self, repo: RepoInfo) -> str:
        return _section(
            "Pick a feature that interests you and dig deep.",
            [
                "**Directions**: a specific feature, algorithm optimizations, architecture decisions, performance tuning",
                "**Advanced topics**: concurrency, memory management, caching, distributed design",
            ],
            questions=[
                "Which feature interests you most?",
                "Which algorithm would you like to understand?",
                "Which module has the most interesting design?",
                "What clever techniques did you find?",
            ],
            activities=[
                "Analyse one feature end to end",
                "Work through a complex algorithm",
                "Study the performance techniques",
            ],
        )

    def _summary(self, repo: RepoInfo) -> str:
        return _section(
            "Wrap up the study and distill what you learned.",
            [
                f"**Summary**: you have studied the architecture, modules and patterns of {repo.name}",
                "**Possible improvements**: richer docs, higher test coverage, architecture refinements",
                "**Reflection**: how will you apply this to your own projects?",
            ],
            questions=[
                "What was your biggest takeaway?",
                "Which new design ideas did you pick up?",
                "How will you apply them in your own projects?",
                "What could the project still improve?",
            ],
            activities=[
                "Write a study report",
                "Collect the design patterns you learned",
                "Plan a practice project",
            ],
        )


# =============================================================================
# Heuristics
# =============================================================================


def estimate_difficulty(repo: RepoInfo) -> str:
    lines = repo.stats.total_lines
    if lines < 1000:
        return "beginner"
    if lines < 10000:
        return "intermediate"
    if lines < 50000:
        return "advanced"
    return "expert"


def prerequisites_for(repo: RepoInfo) -> list[str]:
    lang = repo.primary_language.lower()
    prereqs = ["general programming knowledge"]
    if "javascript" in lang or "typescript" in lang:
        prereqs += ["JavaScript fundamentals", "Node.js basics", "a modern frontend framework"]
    elif "python" in lang:
        prereqs += ["Python fundamentals", "the Python packaging ecosystem"]
    elif "java" in lang:
        prereqs += ["Java fundamentals", "JVM concepts", "the Spring framework"]
    return prereqs


def main_files(repo: RepoInfo) -> list[str]:
    found = [
        name for name in COMMON_ROOT_FILES
        if any(name.split(".")[0].lower() in d.lower() for d in repo.stats.directories)
    ]
    return found or ["README.md"]


def project_structure(repo: RepoInfo) -> str:
    dirs = repo.stats.directories
    if any("src" in d for d in dirs):
        return "conventional src layout"
    if any("lib" in d for d in dirs):
        return "library layout"
    if any("app" in d for d in dirs):
        return "application layout"
    return "flat layout"


def entry_points(repo: RepoInfo) -> list[str]:
    points = []
    if repo.stats.file_types.get(".js") or repo.stats.file_types.get(".ts"):
        points += ["index.js", "main.js", "app.js", "server.js"]
    if repo.stats.file_types.get(".py"):
        points += ["__init__.py", "main.py", "app.py"]
    return points


def _section(intro: str, content: list[str], questions: list[str], activities: list[str]) -> str:
    lines = [intro, "", *content, "", "**Guiding questions**:"]
    lines += [f"- {q}" for q in questions]
    lines += ["", "**Activities**:"]
    lines += [f"- {a}" for a in activities]
    return "\n".join(lines)
