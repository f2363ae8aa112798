"""
External integrations.

- github_client: repository metadata from the GitHub REST API
- x_publisher: optional learning-summary publishing to X.com
"""

from repostudy.integrations.github_client import GithubClient, analyze_tree, parse_locator
from repostudy.integrations.x_publisher import XPublisher

__all__ = [
    "GithubClient",
    "analyze_tree",
    "parse_locator",
    "XPublisher",
]
