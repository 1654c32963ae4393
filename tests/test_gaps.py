"""Tests for gap analysis."""

import json
from collections.abc import Callable
from unittest.mock import MagicMock

from deep_research.data import ExtractedFact, Importance, SourceEvaluation, SubQuestion
from deep_research.gaps import GapAnalyzer, parse_gaps
from deep_research.retry import AttemptPolicy

ClientFactory = Callable[..., MagicMock]


def test_parse_gaps() -> None:
    gaps = parse_gaps(
        {
            "gaps": [
                {
                    "subQuestionId": "q1",
                    "description": "Enterprise pricing is missing",
                    "suggestedQuery": "enterprise pricing 2024",
                    "importance": "CRITICAL",
                },
                {"description": "Support hours unclear", "importance": "whenever"},
                "junk",
            ],
            "conflicts": [
                {
                    "topic": "Rate limits",
                    "positions": ["60 rpm", "100 rpm"],
                    "suggestedQuery": "api rate limits",
                }
            ],
        }
    )

    assert len(gaps) == 3
    assert gaps[0].importance == Importance.CRITICAL
    assert gaps[0].suggested_query == "enterprise pricing"
    assert gaps[1].sub_question_id == "new"
    assert gaps[1].importance == Importance.IMPORTANT
    assert gaps[1].suggested_query == "Support hours unclear"
    assert gaps[2].sub_question_id == "conflict"
    assert gaps[2].description == "Conflicting info: Rate limits"
    assert gaps[2].importance == Importance.IMPORTANT


def test_parse_gaps_without_conflicts() -> None:
    assert parse_gaps({"gaps": []}) == []


class TestGapAnalyzer:
    async def test_zero_facts_does_not_raise(
        self, scripted_client: ClientFactory, sub_questions: list[SubQuestion]
    ) -> None:
        client = scripted_client(
            json.dumps(
                {
                    "gaps": [
                        {
                            "subQuestionId": "q1",
                            "description": "No pricing data found",
                            "suggestedQuery": "openai api pricing",
                            "importance": "critical",
                        }
                    ],
                    "conflicts": [],
                }
            )
        )
        analyzer = GapAnalyzer(client)

        gaps = await analyzer.analyze("What does the API cost?", sub_questions, [])

        assert [g.description for g in gaps] == ["No pricing data found"]
        prompt = client.complete.call_args.kwargs["messages"][0]["content"]
        assert "No facts extracted yet." in prompt
        assert "[q1] What does the OpenAI API cost? (pricing, high)" in prompt

    async def test_failure_returns_empty(
        self, scripted_client: ClientFactory, sub_questions: list[SubQuestion]
    ) -> None:
        client = scripted_client("nope", RuntimeError("overloaded"), "{}")
        analyzer = GapAnalyzer(client, policy=AttemptPolicy(first_temperature=0.3, delay_seconds=0))

        assert await analyzer.analyze("Q?", sub_questions, []) == []
        temperatures = [c.kwargs["temperature"] for c in client.complete.call_args_list]
        assert temperatures == [0.3, 0.1, 0.1]

    def test_prompt_caps_facts(
        self,
        make_fact: Callable[..., ExtractedFact],
        make_evaluation: Callable[..., SourceEvaluation],
        sub_questions: list[SubQuestion],
    ) -> None:
        facts = [make_fact(f"Fact number {i} is here", confidence=70) for i in range(60)]
        evaluation = make_evaluation("https://example.com/article", facts)
        prompt = GapAnalyzer(MagicMock()).build_prompt("Q?", sub_questions, [evaluation])

        assert "Fact number 49 is here [confidence: 70]" in prompt
        assert "Fact number 50 is here" not in prompt
