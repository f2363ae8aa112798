"""
Export Module - render study notes into shareable documents.

Components:
- pipeline: format allow-list, request lifecycle and file writing
- renderers: one pure render function per format
- vocabulary: swappable keyword tables for insights/highlights
"""

from repostudy.export.pipeline import (
    FORMATS,
    ExportPipeline,
    ExportRequest,
    ExportState,
    supported_formats,
)
from repostudy.export.vocabulary import DEFAULT_VOCABULARY, KeywordVocabulary

__all__ = [
    "FORMATS",
    "ExportPipeline",
    "ExportRequest",
    "ExportState",
    "supported_formats",
    "KeywordVocabulary",
    "DEFAULT_VOCABULARY",
]
