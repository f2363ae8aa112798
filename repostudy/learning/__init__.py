"""
Learning content collaborators.

- path_planner: seven-stage study path from RepoInfo
- qa_helper: keyword-classified template answers
"""

from repostudy.learning.path_planner import LearningPathPlanner
from repostudy.learning.qa_helper import QAHelper, classify_question

__all__ = [
    "LearningPathPlanner",
    "QAHelper",
    "classify_question",
]
