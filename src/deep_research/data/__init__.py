"""Data models for deep research."""

from deep_research.data.models import (
    ConfidenceLevel,
    ExtractedContent,
    ExtractedFact,
    Gap,
    Importance,
    PhaseStats,
    Priority,
    ResearchResult,
    ResearchStats,
    SearchResultItem,
    SourceEvaluation,
    SourceReference,
    SubQuestion,
    SubQuestionCategory,
    TableData,
    VerifiedFact,
)

__all__ = [
    "ConfidenceLevel",
    "ExtractedContent",
    "ExtractedFact",
    "Gap",
    "Importance",
    "PhaseStats",
    "Priority",
    "ResearchResult",
    "ResearchStats",
    "SearchResultItem",
    "SourceEvaluation",
    "SourceReference",
    "SubQuestion",
    "SubQuestionCategory",
    "TableData",
    "VerifiedFact",
]
