"""
repostudy - guided study of source repositories.

Packages:
- core: domain models, errors, collaborator contracts, retry
- search: tokenization, similarity and snippet extraction
- notes: filesystem-backed note persistence
- sessions: in-memory learning session registry
- export: format allow-list, renderers and export pipeline
- learning: learning path planning and Q&A heuristics
- integrations: GitHub metadata and X.com publishing
- cli: typer entry point and interactive shell
"""

__version__ = "1.0.0"
