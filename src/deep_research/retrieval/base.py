from typing import Protocol

from deep_research.data import ExtractedContent, SearchResultItem


class Retriever(Protocol):
    """Interface for turning search results into page content."""

    async def retrieve_all(
        self, results: list[SearchResultItem], max_pages: int = 20
    ) -> list[ExtractedContent]:
        """Fetch distinct result URLs; pages that fail are left out."""
        ...
