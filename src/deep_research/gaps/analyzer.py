import logging
import time
from typing import Any

from deep_research.data import Gap, Importance, SourceEvaluation, SubQuestion
from deep_research.llm import DEFAULT_MODEL, ModelClient
from deep_research.parsing import extract_and_parse_json
from deep_research.prompts import GAP_ANALYSIS_PROMPT
from deep_research.query.sanitize import sanitize_search_query
from deep_research.retry import AttemptPolicy

logger = logging.getLogger(__name__)

MAX_PROMPT_FACTS = 50
NO_FACTS_PLACEHOLDER = "No facts extracted yet."


def _importance(raw: Any) -> Importance:
    try:
        return Importance(str(raw).lower())
    except ValueError:
        return Importance.IMPORTANT


def _suggested_query(raw: Any, fallback: str) -> str:
    return sanitize_search_query(str(raw or "")) or sanitize_search_query(fallback)


def parse_gaps(parsed: dict[str, Any]) -> list[Gap]:
    """Build gaps from decoded model output; each conflict becomes a gap too."""
    gaps: list[Gap] = []
    for item in parsed.get("gaps") or []:
        if not isinstance(item, dict):
            continue
        description = str(item.get("description") or "")
        gaps.append(
            Gap(
                sub_question_id=str(item.get("subQuestionId") or "new"),
                description=description,
                suggested_query=_suggested_query(item.get("suggestedQuery"), description),
                importance=_importance(item.get("importance")),
            )
        )

    conflicts = parsed.get("conflicts")
    if isinstance(conflicts, list):
        for conflict in conflicts:
            if not isinstance(conflict, dict):
                continue
            topic = str(conflict.get("topic") or "unknown")
            gaps.append(
                Gap(
                    sub_question_id="conflict",
                    description=f"Conflicting info: {topic}",
                    suggested_query=_suggested_query(conflict.get("suggestedQuery"), topic),
                    importance=Importance.IMPORTANT,
                )
            )
    return gaps


class GapAnalyzer:
    """Ask the model what the gathered facts still leave unanswered.

    Never raises: when every attempt fails the result is an empty list.

    Args:
        client: Model client.
        model: Model ID.
        policy: Retry policy; defaults to 3 attempts at 0.3 then 0.1.
    """

    def __init__(
        self,
        client: ModelClient,
        *,
        model: str = DEFAULT_MODEL,
        policy: AttemptPolicy | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._policy = policy or AttemptPolicy(first_temperature=0.3)

    def build_prompt(
        self,
        question: str,
        sub_questions: list[SubQuestion],
        evaluations: list[SourceEvaluation],
    ) -> str:
        sub_questions_str = "\n".join(
            f"- [{sq.id}] {sq.question} ({sq.category}, {sq.priority})" for sq in sub_questions
        )
        facts = [fact for e in evaluations for fact in e.extracted_facts][:MAX_PROMPT_FACTS]
        facts_str = "\n".join(
            f"- {f.claim} [confidence: {f.confidence}] [source: {f.source_url}]" for f in facts
        )
        return GAP_ANALYSIS_PROMPT.format(
            question=question,
            sub_questions=sub_questions_str,
            facts=facts_str or NO_FACTS_PLACEHOLDER,
        )

    async def analyze(
        self,
        question: str,
        sub_questions: list[SubQuestion],
        evaluations: list[SourceEvaluation],
    ) -> list[Gap]:
        t0 = time.monotonic()
        prompt = self.build_prompt(question, sub_questions, evaluations)

        async def attempt(temperature: float) -> list[Gap]:
            response = await self._client.complete(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=3000,
                temperature=temperature,
            )
            parsed = extract_and_parse_json(
                response.content,
                required_fields=("gaps",),
                array_field="gaps",
                context="gap analysis",
            )
            return parse_gaps(parsed)

        def fallback(error: BaseException) -> list[Gap]:
            return []

        gaps = await self._policy.run(attempt, fallback, label="gap analysis")
        logger.info("Found %d gaps in %.0fms", len(gaps), (time.monotonic() - t0) * 1000)
        return gaps
