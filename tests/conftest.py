"""Shared fixtures: builders for pipeline data and a scripted model client."""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from deep_research.data import (
    ExtractedContent,
    ExtractedFact,
    Priority,
    SourceEvaluation,
    SubQuestion,
    SubQuestionCategory,
)
from deep_research.llm import Completion
from deep_research.url import extract_domain

ARTICLE_TEXT = (
    "OpenAI offers several API pricing tiers for developers building products. "
    "The standard model costs a few dollars per million input tokens, while the "
    "larger reasoning models cost more per request. Batch requests receive a "
    "discount of half the regular price and usually finish within a day. "
    "Enterprise customers can negotiate volume commitments with the sales team, "
    "and every account starts with a usage limit that grows over time."
)


@pytest.fixture
def make_content() -> Callable[..., ExtractedContent]:
    def _make(
        url: str = "https://example.com/article",
        *,
        title: str = "Example article",
        text: str = ARTICLE_TEXT,
        publish_date: datetime | None = None,
    ) -> ExtractedContent:
        return ExtractedContent(
            url=url,
            title=title,
            domain=extract_domain(url),
            main_content=text,
            fetched_at=datetime.now(tz=UTC),
            publish_date=publish_date,
            word_count=len(text.split()),
        )

    return _make


@pytest.fixture
def make_fact() -> Callable[..., ExtractedFact]:
    def _make(
        claim: str = "The Pro plan costs $20 per month",
        source_url: str = "https://example.com/article",
        **kwargs: Any,
    ) -> ExtractedFact:
        return ExtractedFact(claim=claim, source_url=source_url, **kwargs)

    return _make


@pytest.fixture
def make_evaluation(
    make_content: Callable[..., ExtractedContent],
) -> Callable[..., SourceEvaluation]:
    def _make(
        url: str,
        facts: list[ExtractedFact],
        *,
        authority: int = 50,
        overall: int = 50,
    ) -> SourceEvaluation:
        return SourceEvaluation(
            url=url,
            domain=extract_domain(url),
            authority_score=authority,
            recency_score=50,
            relevance_score=50,
            overall_score=overall,
            extracted_facts=tuple(facts),
            content=make_content(url, title=f"Title of {extract_domain(url)}"),
        )

    return _make


@pytest.fixture
def sub_questions() -> list[SubQuestion]:
    return [
        SubQuestion(
            id="q1",
            question="What does the OpenAI API cost?",
            category=SubQuestionCategory.PRICING,
            priority=Priority.HIGH,
            search_query="openai api pricing tokens",
        ),
        SubQuestion(
            id="q2",
            question="Are there batch discounts?",
            category=SubQuestionCategory.FEATURES,
            priority=Priority.MEDIUM,
            search_query="openai batch discount",
        ),
    ]


@pytest.fixture
def scripted_client() -> Callable[..., MagicMock]:
    """Model client whose ``complete`` returns (or raises) the given items in order."""

    def _make(*responses: str | BaseException) -> MagicMock:
        client = MagicMock()
        client.complete = AsyncMock(
            side_effect=[
                r if isinstance(r, BaseException) else Completion(content=r) for r in responses
            ]
        )
        return client

    return _make
