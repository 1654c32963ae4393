import asyncio
import logging
import time

from deep_research.data import SearchResultItem, SubQuestion
from deep_research.search.base import SearchBackend

logger = logging.getLogger(__name__)


def flatten_results(results: dict[str, list[SearchResultItem]]) -> list[SearchResultItem]:
    """Concatenate per-sub-question results in sub-question order."""
    return [item for items in results.values() for item in items]


class ParallelSearcher:
    """Run one search per sub-question, a bounded batch at a time.

    A failed search maps its sub-question to an empty list; it never affects
    the other sub-questions.

    Args:
        backend: Search backend.
        max_concurrent: Searches running at the same time.
    """

    def __init__(self, backend: SearchBackend, *, max_concurrent: int = 3) -> None:
        self._backend = backend
        self._max_concurrent = max(1, max_concurrent)

    async def search_all(
        self,
        sub_questions: list[SubQuestion],
        results_per_query: int = 5,
    ) -> dict[str, list[SearchResultItem]]:
        """Search every sub-question.

        Args:
            sub_questions: Sub-questions to search, in order.
            results_per_query: Cap on results kept per sub-question.

        Returns:
            Mapping from sub-question id to its results, in input order.
        """
        t0 = time.monotonic()
        results: dict[str, list[SearchResultItem]] = {}

        for start in range(0, len(sub_questions), self._max_concurrent):
            batch = sub_questions[start : start + self._max_concurrent]
            outcomes = await asyncio.gather(
                *(self._backend.search(sq.search_query) for sq in batch),
                return_exceptions=True,
            )
            for sq, outcome in zip(batch, outcomes, strict=True):
                if isinstance(outcome, BaseException):
                    logger.warning("Search failed for %r: %s", sq.search_query, outcome)
                    results[sq.id] = []
                    continue
                results[sq.id] = self._tag(sq, outcome, results_per_query)

        total = sum(len(items) for items in results.values())
        logger.info(
            "Completed %d searches, got %d results in %.0fms",
            len(sub_questions),
            total,
            (time.monotonic() - t0) * 1000,
        )
        return results

    @staticmethod
    def _tag(
        sq: SubQuestion, items: list[SearchResultItem], limit: int
    ) -> list[SearchResultItem]:
        seen: set[str] = set()
        tagged: list[SearchResultItem] = []
        for item in items:
            if len(tagged) >= limit:
                break
            if not item.url or item.url in seen:
                continue
            seen.add(item.url)
            tagged.append(
                SearchResultItem(
                    url=item.url,
                    title=item.title,
                    snippet=item.snippet,
                    position=len(tagged) + 1,
                    query=sq.search_query,
                )
            )
        return tagged
