import asyncio
import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from deep_research.data import ExtractedContent, ExtractedFact, SourceEvaluation, SubQuestion
from deep_research.evaluation.scoring import (
    authority_score,
    overall_score,
    recency_score,
    relevance_score,
)
from deep_research.llm import DEFAULT_MODEL, ModelClient
from deep_research.parsing import extract_and_parse_json
from deep_research.prompts import FACT_EXTRACTION_PROMPT
from deep_research.retry import AttemptPolicy
from deep_research.validation import validate_and_score

logger = logging.getLogger(__name__)

MAX_PROMPT_CONTENT_CHARS = 5000


def _optional_str(raw: Any) -> str | None:
    if raw is None or raw == "":
        return None
    return str(raw)


def _optional_int(raw: Any) -> int | None:
    if isinstance(raw, bool) or not isinstance(raw, int | float):
        return None
    return int(raw)


def parse_facts(items: list[Any], source_url: str, limit: int = 15) -> list[ExtractedFact]:
    """Turn decoded fact objects into ``ExtractedFact``s, skipping blank claims."""
    facts: list[ExtractedFact] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        claim = str(item.get("claim") or "").strip()
        if not claim:
            continue
        facts.append(
            ExtractedFact(
                claim=claim,
                source_url=source_url,
                value=_optional_str(item.get("value")),
                context=str(item.get("context") or ""),
                confidence=_optional_int(item.get("confidence")),
                category=str(item.get("category") or "claim"),
            )
        )
    return facts[:limit]


class SourceEvaluator:
    """Score retrieved pages and extract validated facts from them.

    Args:
        client: Model client for fact extraction.
        model: Model ID.
        policy: Retry policy; defaults to 3 attempts at 0.2 then 0.1.
        max_concurrent: Pages evaluated at the same time.
        max_facts: Cap on facts requested and kept per page.
        clock: Returns the current time, for recency scoring.
    """

    def __init__(
        self,
        client: ModelClient,
        *,
        model: str = DEFAULT_MODEL,
        policy: AttemptPolicy | None = None,
        max_concurrent: int = 5,
        max_facts: int = 15,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._policy = policy or AttemptPolicy(first_temperature=0.2)
        self._max_concurrent = max(1, max_concurrent)
        self._max_facts = max_facts
        self._clock = clock or (lambda: datetime.now(tz=UTC))

    async def evaluate_all(
        self, contents: list[ExtractedContent], sub_questions: list[SubQuestion]
    ) -> list[SourceEvaluation]:
        t0 = time.monotonic()
        evaluations: list[SourceEvaluation] = []

        for start in range(0, len(contents), self._max_concurrent):
            batch = contents[start : start + self._max_concurrent]
            outcomes = await asyncio.gather(
                *(self.evaluate_source(content, sub_questions) for content in batch),
                return_exceptions=True,
            )
            for content, outcome in zip(batch, outcomes, strict=True):
                if isinstance(outcome, BaseException):
                    logger.error("Evaluation failed for %s: %s", content.url, outcome)
                    continue
                evaluations.append(outcome)

        evaluations.sort(key=lambda e: e.overall_score, reverse=True)
        logger.info(
            "Evaluated %d/%d sources in %.0fms",
            len(evaluations),
            len(contents),
            (time.monotonic() - t0) * 1000,
        )
        return evaluations

    async def evaluate_source(
        self, content: ExtractedContent, sub_questions: list[SubQuestion]
    ) -> SourceEvaluation:
        authority = authority_score(content.domain)
        recency = recency_score(content.publish_date, self._clock())
        relevance = relevance_score(content, sub_questions)

        raw_facts = await self.extract_facts(content)
        facts = validate_and_score(raw_facts)
        logger.info("%s: %d raw facts -> %d valid facts", content.url, len(raw_facts), len(facts))

        return SourceEvaluation(
            url=content.url,
            domain=content.domain,
            authority_score=authority,
            recency_score=recency,
            relevance_score=relevance,
            overall_score=overall_score(authority, recency, relevance),
            extracted_facts=tuple(facts),
            content=content,
        )

    async def extract_facts(self, content: ExtractedContent) -> list[ExtractedFact]:
        """Ask the model for facts; an empty list once every attempt failed."""
        prompt = FACT_EXTRACTION_PROMPT.format(
            max_facts=self._max_facts,
            url=content.url,
            domain=content.domain,
            content=content.main_content[:MAX_PROMPT_CONTENT_CHARS],
        )

        async def attempt(temperature: float) -> list[ExtractedFact]:
            response = await self._client.complete(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=4000,
                temperature=temperature,
            )
            parsed = extract_and_parse_json(
                response.content,
                required_fields=("facts",),
                array_field="facts",
                context=f"fact extraction for {content.url}",
            )
            return parse_facts(parsed["facts"], content.url, self._max_facts)

        def fallback(error: BaseException) -> list[ExtractedFact]:
            return []

        return await self._policy.run(attempt, fallback, label=f"fact extraction for {content.url}")
