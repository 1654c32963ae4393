"""Pipeline protocol for end-to-end research."""

from typing import Protocol

from deep_research.data import ResearchResult


class ResearchPipeline(Protocol):
    """Interface for end-to-end research pipelines."""

    async def research(self, question: str) -> ResearchResult:
        """Answer ``question`` with cited sources.

        Args:
            question: The user's research question.

        Returns:
            The answer together with its sources, facts, gaps and stats.
        """
        ...
