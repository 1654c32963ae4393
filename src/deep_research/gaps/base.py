from typing import Protocol

from deep_research.data import Gap, SourceEvaluation, SubQuestion


class GapFinder(Protocol):
    """Interface for finding missing or conflicting information."""

    async def analyze(
        self,
        question: str,
        sub_questions: list[SubQuestion],
        evaluations: list[SourceEvaluation],
    ) -> list[Gap]: ...
