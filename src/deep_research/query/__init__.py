from deep_research.query.base import QueryDecomposer
from deep_research.query.decomposer import (
    ModelQueryDecomposer,
    fallback_sub_questions,
    parse_sub_questions,
)
from deep_research.query.sanitize import (
    build_search_url,
    query_needs_recency,
    sanitize_search_query,
)

__all__ = [
    "ModelQueryDecomposer",
    "QueryDecomposer",
    "build_search_url",
    "fallback_sub_questions",
    "parse_sub_questions",
    "query_needs_recency",
    "sanitize_search_query",
]
