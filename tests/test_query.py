"""Tests for query sanitization and decomposition."""

import json
import re
from collections.abc import Callable
from unittest.mock import MagicMock

import pytest

from deep_research.data import Priority, SubQuestionCategory
from deep_research.query import (
    ModelQueryDecomposer,
    build_search_url,
    fallback_sub_questions,
    parse_sub_questions,
    query_needs_recency,
    sanitize_search_query,
)
from deep_research.retry import AttemptPolicy

YEAR_RE = re.compile(r"\b(?:19|20)\d{2}\b")


class TestSanitizeSearchQuery:
    @pytest.mark.parametrize(
        "query",
        [
            "best laptops 2024",
            "openai pricing as of January 2023",
            "gpu prices currently in 2022",
            "tax rules updated for 2025 review",
            "1999 vs 2019 internet speeds",
        ],
    )
    def test_removes_years(self, query: str) -> None:
        assert not YEAR_RE.search(sanitize_search_query(query))

    def test_removes_stale_phrase(self) -> None:
        assert sanitize_search_query("openai pricing as of March 2024") == "openai pricing"

    def test_removes_filler_words(self) -> None:
        result = sanitize_search_query("comprehensive in-depth guide to detailed pricing")
        assert result == "guide to pricing"

    def test_caps_word_count(self) -> None:
        result = sanitize_search_query("one two three four five six seven eight nine ten")
        assert result.split() == ["one", "two", "three", "four", "five", "six", "seven", "eight"]

    def test_collapses_whitespace(self) -> None:
        assert sanitize_search_query("  claude   api\tlimits ") == "claude api limits"

    def test_keeps_non_year_numbers(self) -> None:
        assert sanitize_search_query("gpt 4 context 128000 tokens") == "gpt 4 context 128000 tokens"


def test_query_needs_recency() -> None:
    assert query_needs_recency("claude api pricing")
    assert not query_needs_recency("history of the printing press")


class TestBuildSearchUrl:
    def test_google_recency_filter(self) -> None:
        url = build_search_url("claude api pricing")
        assert url.startswith("https://www.google.com/search?q=claude+api+pricing")
        assert "tbs=qdr%3Am" in url

    def test_google_without_recency(self) -> None:
        assert "tbs=" not in build_search_url("history of typography")

    def test_duckduckgo(self) -> None:
        url = build_search_url("claude api pricing", "duckduckgo")
        assert url == "https://duckduckgo.com/html/?q=claude+api+pricing"

    def test_unknown_engine(self) -> None:
        with pytest.raises(ValueError, match="Unsupported search engine"):
            build_search_url("query", "altavista")


class TestParseSubQuestions:
    def test_coerces_fields(self) -> None:
        result = parse_sub_questions(
            [
                {
                    "id": "q1",
                    "question": "What does it cost?",
                    "category": "PRICING",
                    "priority": "high",
                    "searchQuery": "claude pricing 2024",
                },
                {"question": "Anything else?", "category": "gossip", "priority": "urgent"},
            ]
        )
        assert result[0].category == SubQuestionCategory.PRICING
        assert result[0].priority == Priority.HIGH
        assert result[0].search_query == "claude pricing"
        assert result[1].id == "q2"
        assert result[1].category == SubQuestionCategory.FACTS
        assert result[1].priority == Priority.MEDIUM
        assert result[1].search_query == "Anything else?"

    def test_ids_are_unique(self) -> None:
        items = [{"id": "q1", "question": f"Question {i}", "searchQuery": "x y"} for i in range(3)]
        assert [sq.id for sq in parse_sub_questions(items)] == ["q1", "q1_2", "q1_3"]

    def test_skips_items_without_query(self) -> None:
        result = parse_sub_questions([{"id": "q1", "searchQuery": "2024"}, "not a dict"])
        assert result == []


def test_fallback_sub_questions() -> None:
    result = fallback_sub_questions("What is the best CRM for startups in 2024?")
    assert [sq.id for sq in result] == ["q1", "q2"]
    assert result[0].category == SubQuestionCategory.FACTS
    assert result[0].priority == Priority.HIGH
    assert result[1].category == SubQuestionCategory.COMPARISON
    assert result[1].question.endswith(" - detailed analysis")
    assert result[1].search_query.endswith("analysis")
    assert all(not YEAR_RE.search(sq.search_query) for sq in result)


class TestModelQueryDecomposer:
    async def test_decompose(self, scripted_client: Callable[..., MagicMock]) -> None:
        payload = {
            "subQuestions": [
                {
                    "id": "q1",
                    "question": "What are OpenAI's API prices?",
                    "category": "pricing",
                    "priority": "high",
                    "searchQuery": "openai api pricing 2024",
                },
                {
                    "id": "q2",
                    "question": "What are Anthropic's API prices?",
                    "category": "pricing",
                    "priority": "high",
                    "searchQuery": "anthropic api pricing",
                },
            ]
        }
        client = scripted_client("```json\n" + json.dumps(payload) + "\n```")
        decomposer = ModelQueryDecomposer(client)

        result = await decomposer.decompose("OpenAI or Anthropic?")

        assert [sq.search_query for sq in result] == ["openai api pricing", "anthropic api pricing"]
        kwargs = client.complete.call_args.kwargs
        assert kwargs["temperature"] == 0.3
        assert kwargs["max_tokens"] == 3000
        assert "OpenAI or Anthropic?" in kwargs["messages"][0]["content"]

    async def test_retry_then_success(self, scripted_client: Callable[..., MagicMock]) -> None:
        client = scripted_client(
            "not json at all",
            '{"subQuestions": [{"id": "q1", "question": "Q", "searchQuery": "good query"}]}',
        )
        decomposer = ModelQueryDecomposer(
            client, policy=AttemptPolicy(first_temperature=0.3, delay_seconds=0)
        )

        result = await decomposer.decompose("Question?")

        assert result[0].search_query == "good query"
        temperatures = [c.kwargs["temperature"] for c in client.complete.call_args_list]
        assert temperatures == [0.3, 0.1]

    async def test_fallback_after_failures(
        self, scripted_client: Callable[..., MagicMock]
    ) -> None:
        client = scripted_client(RuntimeError("down"), '{"subQuestions": []}', "garbage")
        decomposer = ModelQueryDecomposer(
            client, policy=AttemptPolicy(first_temperature=0.3, delay_seconds=0)
        )

        result = await decomposer.decompose("Which vector database should I use in 2025?")

        assert len(result) == 2
        assert result[0].question == "Which vector database should I use in 2025?"
        assert not YEAR_RE.search(result[0].search_query)
