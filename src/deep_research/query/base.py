from typing import Protocol

from deep_research.data import SubQuestion


class QueryDecomposer(Protocol):
    """Interface for breaking a question into searchable sub-questions."""

    async def decompose(self, question: str) -> list[SubQuestion]:
        """Return sub-questions in the order they should be researched.

        Implementations never raise; they fall back to a default plan.
        """
        ...
