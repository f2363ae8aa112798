"""
Unit tests for the learning path planner.
"""

from dataclasses import replace

import pytest

from repostudy.core.contracts import PathPlanner
from repostudy.core.models import RepoStats
from repostudy.learning.path_planner import (
    LearningPathPlanner,
    estimate_difficulty,
    prerequisites_for,
    project_structure,
)


@pytest.fixture
def planner():
    return LearningPathPlanner()


class TestPlan:
    def test_seven_ordered_steps(self, planner, sample_repo_info):
        path = planner.plan(sample_repo_info)

        assert path.total_steps == 7
        assert [s.id for s in path.steps] == [
            "overview",
            "architecture",
            "modules",
            "components",
            "patterns",
            "deep-dive",
            "summary",
        ]

    def test_overview_mentions_repository_facts(self, planner, sample_repo_info):
        overview = planner.plan(sample_repo_info).steps[0]

        assert overview.title == "Project Overview"
        assert "42" in overview.content
        assert "3300" in overview.content
        assert "TypeScript" in overview.content

    def test_deterministic(self, planner, sample_repo_info):
        assert planner.plan(sample_repo_info) == planner.plan(sample_repo_info)

    def test_estimated_total(self, planner, sample_repo_info):
        assert planner.plan(sample_repo_info).estimated_total == "5h 10m"

    def test_difficulty_and_prerequisites(self, planner, sample_repo_info):
        path = planner.plan(sample_repo_info)

        assert path.difficulty == "intermediate"
        assert "JavaScript fundamentals" in path.prerequisites

    def test_satisfies_planner_contract(self, planner):
        assert isinstance(planner, PathPlanner)

    def test_empty_repository(self, planner, sample_repo_info):
        repo = replace(sample_repo_info, stats=RepoStats(), description=None)
        path = planner.plan(repo)

        assert path.total_steps == 7
        assert "No description provided" in path.steps[0].content


class TestHeuristics:
    @pytest.mark.parametrize(
        "lines, expected",
        [(0, "beginner"), (999, "beginner"), (1000, "intermediate"), (20000, "advanced"), (50000, "expert")],
    )
    def test_estimate_difficulty(self, sample_repo_info, lines, expected):
        repo = replace(sample_repo_info, stats=RepoStats(total_lines=lines))
        assert estimate_difficulty(repo) == expected

    def test_python_prerequisites(self, sample_repo_info):
        repo = replace(sample_repo_info, primary_language="Python")
        assert "Python fundamentals" in prerequisites_for(repo)

    def test_project_structure(self, sample_repo_info):
        assert project_structure(sample_repo_info) == "conventional src layout"
        flat = replace(sample_repo_info, stats=RepoStats(directories=("docs",)))
        assert project_structure(flat) == "flat layout"
