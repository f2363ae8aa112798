"""
Text search primitives: tokenization, edit distance, keywords, snippets.

All functions are pure and stateless.
"""

from __future__ import annotations

import re
from collections import Counter

_NON_ALNUM = re.compile(r"[\W_]+")
_SENTENCE_SPLIT = re.compile(r"[.!?。！？]+")

DEFAULT_SNIPPET_RADIUS = 50


def tokenize(text: str) -> list[str]:
    """Lowercase, replace non-alphanumeric runs with spaces, split."""
    return _NON_ALNUM.sub(" ", text.lower()).split()


def levenshtein(a: str, b: str) -> int:
    """
    Classic dynamic-programming edit distance.

    Unit cost for insertion, deletion and substitution. Runs in
    O(len(a) * len(b)) time keeping only two rows.
    """
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(
                current[j - 1] + 1,      # insertion
                previous[j] + 1,         # deletion
                previous[j - 1] + cost,  # substitution
            ))
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """Normalized similarity in [0, 1]; 1.0 when both strings are empty."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein(a, b) / longest


def extract_keywords(text: str, k: int = 10) -> list[str]:
    """
    Top ``k`` tokens longer than two characters by frequency.

    Ties keep first-occurrence order (Counter preserves insertion order and
    sorted() is stable).
    """
    counts = Counter(token for token in tokenize(text) if len(token) > 2)
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return [word for word, _ in ranked[:k]]


def extract_snippet(text: str, query: str, radius: int = DEFAULT_SNIPPET_RADIUS) -> str:
    """Trimmed substring around the first case-insensitive match of ``query``."""
    if not query:
        return ""
    index = text.lower().find(query.lower())
    if index == -1:
        return ""
    start = max(0, index - radius)
    end = min(len(text), index + len(query) + radius)
    return text[start:end].strip()


def summarize(text: str, max_length: int = 200) -> str:
    """Cut ``text`` at sentence boundaries so it fits in ``max_length``."""
    if len(text) <= max_length:
        return text

    summary = ""
    for sentence in _SENTENCE_SPLIT.split(text):
        if len(summary) + len(sentence) > max_length:
            summary += sentence[: max_length - len(summary)]
            break
        summary += sentence + "."
    return summary + "..."
