import json
import logging
import re
import time

from deep_research.data import (
    ConfidenceLevel,
    Gap,
    Importance,
    ResearchResult,
    ResearchStats,
    SourceReference,
    VerifiedFact,
)
from deep_research.llm import DEFAULT_MODEL, ModelClient
from deep_research.prompts import FOLLOW_UP_PROMPT, SYNTHESIS_PROMPT
from deep_research.retry import AttemptPolicy, Outcome

logger = logging.getLogger(__name__)

FOLLOW_UP_CONTEXT_CHARS = 2000
NO_GAPS_PLACEHOLDER = "No significant gaps identified."

_JSON_ARRAY_RE = re.compile(r"\[.*\]", re.DOTALL)


def collect_sources(facts: list[VerifiedFact]) -> list[SourceReference]:
    """Every source cited by ``facts``, once per URL, highest authority first."""
    seen: set[str] = set()
    sources: list[SourceReference] = []
    for fact in facts:
        for source in fact.sources:
            if source.url not in seen:
                seen.add(source.url)
                sources.append(source)
    sources.sort(key=lambda s: s.authority_score, reverse=True)
    return sources


def overall_confidence(facts: list[VerifiedFact]) -> ConfidenceLevel:
    if not facts:
        return ConfidenceLevel.LOW
    high = sum(1 for f in facts if f.confidence == ConfidenceLevel.HIGH)
    low = sum(1 for f in facts if f.confidence == ConfidenceLevel.LOW)
    if high >= len(facts) * 0.6:
        return ConfidenceLevel.HIGH
    if low >= len(facts) * 0.4:
        return ConfidenceLevel.LOW
    return ConfidenceLevel.MEDIUM


def format_facts(facts: list[VerifiedFact], sources: list[SourceReference]) -> str:
    """One line per fact with its 1-based citation numbers."""
    index = {source.url: i for i, source in enumerate(sources, 1)}
    lines = []
    for fact in facts:
        citations = ", ".join(str(index[s.url]) for s in fact.sources if s.url in index)
        value = f": {fact.value}" if fact.value else ""
        lines.append(
            f"- {fact.claim}{value} [{fact.confidence} confidence] [sources: {citations}]"
        )
    return "\n".join(lines)


def relevant_gaps(gaps: list[Gap]) -> list[Gap]:
    return [g for g in gaps if g.importance != Importance.NICE_TO_HAVE]


class Synthesizer:
    """Write the final cited answer from verified facts.

    Args:
        client: Model client.
        model: Model ID.
        policy: Retry policy for the answer; the last error propagates.
        follow_up_policy: Retry policy for follow-up questions; the last
            error is returned in the outcome.
    """

    def __init__(
        self,
        client: ModelClient,
        *,
        model: str = DEFAULT_MODEL,
        policy: AttemptPolicy | None = None,
        follow_up_policy: AttemptPolicy | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._policy = policy or AttemptPolicy(first_temperature=0.4)
        self._follow_up_policy = follow_up_policy or AttemptPolicy(first_temperature=0.5)

    async def synthesize(
        self,
        question: str,
        facts: list[VerifiedFact],
        gaps: list[Gap],
        stats: ResearchStats,
    ) -> ResearchResult:
        """Produce the research result and record a "synthesis" phase in ``stats``.

        Raises:
            Exception: The model error, once every attempt failed.
        """
        t0 = time.monotonic()
        sources = collect_sources(facts)
        kept_gaps = relevant_gaps(gaps)

        prompt = SYNTHESIS_PROMPT.format(
            question=question,
            facts=format_facts(facts, sources),
            gaps="\n".join(f"- {g.description} ({g.importance})" for g in kept_gaps)
            or NO_GAPS_PLACEHOLDER,
            sources="\n".join(
                f"[{i}] {s.title or s.domain} - {s.url}" for i, s in enumerate(sources, 1)
            ),
        )

        async def attempt(temperature: float) -> str:
            response = await self._client.complete(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=4000,
                temperature=temperature,
            )
            return response.content

        answer = await self._policy.run(attempt, label="synthesis")

        follow_ups = await self.follow_up_questions(question, answer)
        if not follow_ups.ok:
            logger.warning("Failed to generate follow-up questions: %s", follow_ups.error)

        duration_ms = (time.monotonic() - t0) * 1000
        stats.record("synthesis", duration_ms, 1)
        logger.info("Generated response in %.0fms", duration_ms)

        return ResearchResult(
            response=answer,
            sources=sources,
            verified_facts=facts,
            gaps=kept_gaps,
            confidence=overall_confidence(facts),
            follow_up_questions=follow_ups.unwrap_or([]),
            stats=stats,
        )

    async def follow_up_questions(self, question: str, answer: str) -> Outcome[list[str]]:
        """Suggest 3-4 follow-up questions; failures come back as the error."""
        prompt = FOLLOW_UP_PROMPT.format(
            question=question, context=answer[:FOLLOW_UP_CONTEXT_CHARS]
        )

        async def attempt(temperature: float) -> Outcome[list[str]]:
            response = await self._client.complete(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=500,
                temperature=temperature,
            )
            match = _JSON_ARRAY_RE.search(response.content)
            if not match:
                return Outcome(value=[])
            items = json.loads(match.group(0))
            if not isinstance(items, list):
                return Outcome(value=[])
            return Outcome(value=[str(q) for q in items if str(q).strip()])

        return await self._follow_up_policy.run(
            attempt, lambda e: Outcome(error=e), label="follow-up questions"
        )
