"""Tests for data models."""

import pytest

from deep_research.data import (
    ConfidenceLevel,
    Gap,
    Importance,
    ResearchStats,
    SearchResultItem,
    SourceReference,
    SubQuestionCategory,
    VerifiedFact,
)


def test_search_result_item_defaults() -> None:
    item = SearchResultItem(url="https://example.com")
    assert item.title == ""
    assert item.snippet == ""
    assert item.position == 0
    assert item.query == ""


def test_gap_defaults_to_important() -> None:
    gap = Gap(sub_question_id="q1", description="Missing prices", suggested_query="prices")
    assert gap.importance == Importance.IMPORTANT


def test_enums_use_wire_values() -> None:
    assert Importance("nice-to-have") is Importance.NICE_TO_HAVE
    assert SubQuestionCategory("pricing") is SubQuestionCategory.PRICING
    assert str(ConfidenceLevel.HIGH) == "high"


def test_verified_fact_requires_source() -> None:
    with pytest.raises(ValueError):
        VerifiedFact(claim="A claim", sources=(), confidence=ConfidenceLevel.LOW)


def test_verified_fact_with_source() -> None:
    source = SourceReference(url="https://example.com", domain="example.com")
    fact = VerifiedFact(claim="A claim", sources=(source,), confidence=ConfidenceLevel.LOW)
    assert fact.agreement_count == 1
    assert fact.conflicting_info is None
    assert source.authority_score == 50


def test_research_stats_record_appends_phases() -> None:
    stats = ResearchStats()
    stats.record("search", 12.5, 3)
    phase = stats.record("retrieval", 40.0, 2)

    assert [p.name for p in stats.phases] == ["search", "retrieval"]
    assert phase.duration_ms == 40.0
    assert phase.items_processed == 2
    assert stats.total_searches == 0
