from deep_research.retrieval.base import Retriever
from deep_research.retrieval.cache import ContentCache
from deep_research.retrieval.extract import (
    extract_headings,
    extract_publish_date,
    extract_tables,
    normalize_text,
    parse_date,
    truncate_content,
)
from deep_research.retrieval.retriever import PageRetriever, build_content, dismiss_popups

__all__ = [
    "ContentCache",
    "PageRetriever",
    "Retriever",
    "build_content",
    "dismiss_popups",
    "extract_headings",
    "extract_publish_date",
    "extract_tables",
    "normalize_text",
    "parse_date",
    "truncate_content",
]
