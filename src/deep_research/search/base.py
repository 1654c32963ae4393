from typing import Protocol

from deep_research.data import SearchResultItem, SubQuestion


class SearchBackend(Protocol):
    """Interface for running one web search."""

    async def search(self, query: str) -> list[SearchResultItem]:
        """Search the web for ``query``.

        Args:
            query: Search query text.

        Returns:
            Result items in rank order.
        """
        ...


class Searcher(Protocol):
    """Interface for searching a batch of sub-questions."""

    async def search_all(
        self,
        sub_questions: list[SubQuestion],
        results_per_query: int = 5,
    ) -> dict[str, list[SearchResultItem]]:
        """Map each sub-question id to its search results; failures map to []."""
        ...
