"""Pure text search helpers used by the note store and exporters."""

from repostudy.search.text_search import (
    extract_keywords,
    extract_snippet,
    levenshtein,
    similarity,
    summarize,
    tokenize,
)

__all__ = [
    "tokenize",
    "levenshtein",
    "similarity",
    "extract_keywords",
    "extract_snippet",
    "summarize",
]
