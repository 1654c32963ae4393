"""Tests for cross-referencing facts across sources."""

from collections.abc import Callable

import pytest

from deep_research.data import ConfidenceLevel, ExtractedFact, SourceEvaluation
from deep_research.verification import CrossReferencer, confidence_tier, normalize_fact_key

FactFactory = Callable[..., ExtractedFact]
EvaluationFactory = Callable[..., SourceEvaluation]


def test_normalize_fact_key_ignores_order_and_short_words() -> None:
    a = normalize_fact_key("The Pro plan costs $20 per month")
    b = normalize_fact_key("Per month, the pro PLAN costs $20!")
    assert a == b == "costs_month_plan"


def test_normalize_fact_key_uses_first_five_sorted_words() -> None:
    key = normalize_fact_key("zebra yellow xray whale victor umbrella tango")
    assert key == "tango_umbrella_victor_whale_xray"


def test_normalize_fact_key_short_claims_do_not_collide() -> None:
    assert normalize_fact_key("It is 5 km") != normalize_fact_key("Is it 10?")


@pytest.mark.parametrize(
    ("args", "expected"),
    [
        ((3, 70.0, False, 0.0), ConfidenceLevel.HIGH),
        ((2, 75.0, False, 0.0), ConfidenceLevel.HIGH),
        ((2, 50.0, False, 80.0), ConfidenceLevel.HIGH),
        ((1, 95.0, True, 75.0), ConfidenceLevel.HIGH),
        ((2, 50.0, False, 50.0), ConfidenceLevel.MEDIUM),
        ((1, 95.0, True, 50.0), ConfidenceLevel.MEDIUM),
        ((1, 50.0, False, 60.0), ConfidenceLevel.MEDIUM),
        ((1, 50.0, False, 59.0), ConfidenceLevel.LOW),
    ],
)
def test_confidence_tier(args: tuple[int, float, bool, float], expected: ConfidenceLevel) -> None:
    assert confidence_tier(*args) == expected


class TestCrossReferencer:
    @pytest.fixture
    def evaluations(
        self, make_fact: FactFactory, make_evaluation: EvaluationFactory
    ) -> list[SourceEvaluation]:
        official = "https://openai.com/pricing"
        news = "https://techcrunch.com/openai-prices"
        forum = "https://forum.example.com/thread"
        return [
            make_evaluation(
                official,
                [
                    make_fact(
                        "The Pro plan costs $20 per month",
                        official,
                        value="$20",
                        context="Pro: $20 per month",
                        confidence=90,
                    )
                ],
                authority=100,
            ),
            make_evaluation(
                news,
                [
                    make_fact(
                        "Per month the Pro plan costs $20",
                        news,
                        value="$20",
                        confidence=80,
                    ),
                    make_fact("Batch requests receive a fifty percent discount", news,
                              confidence=70),
                ],
                authority=85,
            ),
            make_evaluation(
                forum,
                [
                    make_fact("Users complain about frequent outages", forum, confidence=40),
                    make_fact("Somebody said the service was slow today", forum, confidence=30),
                ],
                authority=50,
            ),
        ]

    def test_groups_agreeing_sources(self, evaluations: list[SourceEvaluation]) -> None:
        verified = CrossReferencer().verify(evaluations)
        pro = next(v for v in verified if v.claim == "The Pro plan costs $20 per month")

        assert pro.agreement_count == 2
        assert [s.domain for s in pro.sources] == ["openai.com", "techcrunch.com"]
        assert pro.sources[0].exact_quote == "Pro: $20 per month"
        assert pro.sources[0].title == "Title of openai.com"
        assert pro.confidence == ConfidenceLevel.HIGH
        assert pro.value == "$20"
        assert pro.conflicting_info is None

    def test_conflicting_values(
        self, make_fact: FactFactory, make_evaluation: EvaluationFactory
    ) -> None:
        a = make_evaluation(
            "https://a.com", [make_fact("The Pro plan costs $20 per month", "https://a.com",
                                        value="$20", confidence=60)]
        )
        b = make_evaluation(
            "https://b.com", [make_fact("The Pro plan costs $25 per month", "https://b.com",
                                        value="$25", confidence=70)]
        )
        verified = CrossReferencer().verify([a, b])

        assert len(verified) == 1
        assert verified[0].claim == "The Pro plan costs $25 per month"
        assert verified[0].conflicting_info == "Conflicting values found: $20 vs $25"

    def test_sorted_by_tier(self, evaluations: list[SourceEvaluation]) -> None:
        verified = CrossReferencer().verify(evaluations)
        order = {ConfidenceLevel.HIGH: 3, ConfidenceLevel.MEDIUM: 2, ConfidenceLevel.LOW: 1}
        ranks = [order[v.confidence] for v in verified]
        assert ranks == sorted(ranks, reverse=True)
        assert verified[-1].confidence == ConfidenceLevel.LOW

    def test_every_fact_has_a_source(self, evaluations: list[SourceEvaluation]) -> None:
        for fact in CrossReferencer().verify(evaluations):
            assert fact.sources
            assert fact.agreement_count == len({s.domain for s in fact.sources})

    def test_idempotent(self, evaluations: list[SourceEvaluation]) -> None:
        referencer = CrossReferencer()
        assert referencer.verify(evaluations) == referencer.verify(evaluations)

    def test_no_evaluations(self) -> None:
        assert CrossReferencer().verify([]) == []
