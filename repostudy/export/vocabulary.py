"""
Keyword vocabulary for insight and highlight extraction.

The tables are configuration, not logic: load a replacement from JSON via
``KeywordVocabulary.from_file`` (or the ``vocabulary_file`` setting).

    {
      "insights": {"architecture": "architectural design approach"},
      "insight_fallbacks": ["...", "...", "..."],
      "highlights": {"factory": "factory pattern implementation"},
      "highlight_fallbacks": ["...", "...", "..."]
    }
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class KeywordVocabulary(BaseModel):
    """Keyword -> canonical phrase tables with fallback phrases."""

    model_config = ConfigDict(frozen=True)

    insights: dict[str, str] = Field(
        default_factory=lambda: {
            "architecture": "architectural design approach",
            "pattern": "design-pattern usage",
            "optimization": "performance-tuning technique",
            "best-practice": "best-practice application",
            "component": "modular design",
        }
    )
    insight_fallbacks: list[str] = Field(
        default_factory=lambda: [
            "overall project architecture",
            "code organization",
            "technology selection rationale",
        ]
    )
    highlights: dict[str, str] = Field(
        default_factory=lambda: {
            "factory": "factory pattern implementation",
            "singleton": "singleton pattern usage",
            "strategy": "strategy pattern application",
            "observer": "observer pattern implementation",
        }
    )
    highlight_fallbacks: list[str] = Field(
        default_factory=lambda: [
            "clean code structure",
            "clear module boundaries",
            "consistent naming conventions",
        ]
    )

    @classmethod
    def from_file(cls, path: Path | str) -> KeywordVocabulary:
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))

    def extract_insights(self, texts: list[str]) -> list[str]:
        return _match_phrases(texts, self.insights, self.insight_fallbacks)

    def extract_highlights(self, texts: list[str]) -> list[str]:
        return _match_phrases(texts, self.highlights, self.highlight_fallbacks)


def _match_phrases(texts: list[str], table: dict[str, str], fallbacks: list[str]) -> list[str]:
    """Phrases whose keyword occurs in any text, deduplicated in first-hit order."""
    found: list[str] = []
    for text in texts:
        lowered = text.lower()
        for keyword, phrase in table.items():
            if keyword.lower() in lowered and phrase not in found:
                found.append(phrase)
    return found or list(fallbacks)


DEFAULT_VOCABULARY = KeywordVocabulary()
