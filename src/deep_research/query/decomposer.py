import logging
import time
from typing import Any

from deep_research.data import Priority, SubQuestion, SubQuestionCategory
from deep_research.errors import ParseFailure
from deep_research.llm import DEFAULT_MODEL, ModelClient
from deep_research.parsing import extract_and_parse_json
from deep_research.prompts import QUERY_DECOMPOSITION_PROMPT
from deep_research.query.sanitize import sanitize_search_query
from deep_research.retry import AttemptPolicy

logger = logging.getLogger(__name__)


def _coerce_category(raw: Any) -> SubQuestionCategory:
    try:
        return SubQuestionCategory(str(raw).lower())
    except ValueError:
        return SubQuestionCategory.FACTS


def _coerce_priority(raw: Any) -> Priority:
    try:
        return Priority(str(raw).lower())
    except ValueError:
        return Priority.MEDIUM


def fallback_sub_questions(question: str) -> list[SubQuestion]:
    """Deterministic two-item plan used when the model cannot produce one."""
    sanitized = sanitize_search_query(question)
    return [
        SubQuestion(
            id="q1",
            question=question,
            category=SubQuestionCategory.FACTS,
            priority=Priority.HIGH,
            search_query=sanitized,
        ),
        SubQuestion(
            id="q2",
            question=f"{question} - detailed analysis",
            category=SubQuestionCategory.COMPARISON,
            priority=Priority.MEDIUM,
            search_query=sanitize_search_query(" ".join(sanitized.split()[:7]) + " analysis"),
        ),
    ]


def parse_sub_questions(items: list[Any]) -> list[SubQuestion]:
    """Build sub-questions from decoded model output.

    Missing ids become ``q<n>``; repeated ids get a numeric suffix so every id
    in the result is unique. Unknown categories and priorities fall back to
    facts and medium.
    """
    seen: set[str] = set()
    result: list[SubQuestion] = []
    for n, item in enumerate(items, 1):
        if not isinstance(item, dict):
            continue
        question = str(item.get("question") or "").strip()
        raw_query = str(item.get("searchQuery") or question)
        search_query = sanitize_search_query(raw_query) or sanitize_search_query(question)
        if not search_query:
            continue

        base_id = str(item.get("id") or f"q{n}")
        sq_id = base_id
        suffix = 2
        while sq_id in seen:
            sq_id = f"{base_id}_{suffix}"
            suffix += 1
        seen.add(sq_id)

        result.append(
            SubQuestion(
                id=sq_id,
                question=question or raw_query,
                category=_coerce_category(item.get("category")),
                priority=_coerce_priority(item.get("priority")),
                search_query=search_query,
            )
        )
    return result


class ModelQueryDecomposer:
    """Decompose a question into sub-questions with a language model.

    Args:
        client: Model client used for the decomposition call.
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

    async def decompose(self, question: str) -> list[SubQuestion]:
        t0 = time.monotonic()
        prompt = QUERY_DECOMPOSITION_PROMPT.format(question=question)

        async def attempt(temperature: float) -> list[SubQuestion]:
            response = await self._client.complete(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=3000,
                temperature=temperature,
            )
            parsed = extract_and_parse_json(
                response.content,
                required_fields=("subQuestions",),
                array_field="subQuestions",
                context="query decomposition",
            )
            sub_questions = parse_sub_questions(parsed["subQuestions"])
            if not sub_questions:
                raise ParseFailure("Model returned no usable sub-questions")
            return sub_questions

        def fallback(error: BaseException) -> list[SubQuestion]:
            logger.error("Decomposition failed, using fallback plan: %s", error)
            return fallback_sub_questions(question)

        sub_questions = await self._policy.run(attempt, fallback, label="query decomposition")
        logger.info(
            "Generated %d sub-questions in %.0fms",
            len(sub_questions),
            (time.monotonic() - t0) * 1000,
        )
        return sub_questions
