from typing import Protocol

from deep_research.data import ExtractedContent, SourceEvaluation, SubQuestion


class Evaluator(Protocol):
    """Interface for scoring pages and extracting their facts."""

    async def evaluate_all(
        self, contents: list[ExtractedContent], sub_questions: list[SubQuestion]
    ) -> list[SourceEvaluation]:
        """Evaluate every page; failed pages are left out.

        Returns:
            Evaluations sorted by overall score, best first.
        """
        ...
