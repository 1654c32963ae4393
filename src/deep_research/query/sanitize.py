"""Search query hygiene.

Model-written queries tend to carry years and "as of <date>" phrases from
stale training data, which steers search engines toward outdated articles.
"""

import logging
import re
from urllib.parse import urlencode

logger = logging.getLogger(__name__)

MAX_QUERY_WORDS = 8

STALE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\blatest\s+as\s+of\b", re.IGNORECASE),
    re.compile(r"\bcurrent(?:ly)?\s+in\s+\d{4}\b", re.IGNORECASE),
    re.compile(
        r"\bas\s+of\s+(?:january|february|march|april|may|june|july|august"
        r"|september|october|november|december)\s+\d{4}\b",
        re.IGNORECASE,
    ),
    re.compile(r"\bupdated?\s+(?:for\s+)?\d{4}\b", re.IGNORECASE),
)

YEAR_PATTERN = re.compile(r"\b(?:19|20)\d{2}\b")

FILLER_WORDS: tuple[str, ...] = (
    "comprehensive",
    "detailed",
    "complete",
    "ultimate",
    "definitive",
    "in-depth",
    "thorough",
)
_FILLER_RE = re.compile(
    r"(?<![\w-])(?:" + "|".join(re.escape(w) for w in FILLER_WORDS) + r")(?![\w-])",
    re.IGNORECASE,
)

RECENCY_INDICATORS: tuple[str, ...] = (
    "pricing",
    "price",
    "cost",
    "how much",
    "current",
    "latest",
    "new",
    "update",
    "announce",
    "release",
    "launch",
    "comparison",
    "vs",
    "versus",
    "compare",
    "best",
    "top",
    "market share",
    "stock",
    "news",
)

SEARCH_ENGINES: dict[str, str] = {
    "google": "https://www.google.com/search",
    "bing": "https://www.bing.com/search",
    "duckduckgo": "https://duckduckgo.com/html/",
}


def sanitize_search_query(query: str) -> str:
    """Strip years, stale-knowledge phrases and filler words from a query.

    The result has collapsed whitespace and at most ``MAX_QUERY_WORDS`` words.
    """
    sanitized = query
    for pattern in STALE_PATTERNS:
        sanitized = pattern.sub(" ", sanitized)
    sanitized = YEAR_PATTERN.sub(" ", sanitized)
    sanitized = _FILLER_RE.sub(" ", sanitized)
    words = sanitized.split()[:MAX_QUERY_WORDS]
    sanitized = " ".join(words)

    if sanitized != query:
        logger.debug("Sanitized query %r -> %r", query, sanitized)
    return sanitized


def query_needs_recency(query: str) -> bool:
    """Whether a query is about something that changes over time (prices, news, ...)."""
    lowered = query.lower()
    return any(indicator in lowered for indicator in RECENCY_INDICATORS)


def build_search_url(query: str, engine: str = "google") -> str:
    """Search results URL for a sanitized ``query``.

    Google queries that need recent information are limited to the past month.

    Raises:
        ValueError: If the engine is not supported.
    """
    try:
        base = SEARCH_ENGINES[engine]
    except KeyError:
        raise ValueError(f"Unsupported search engine: {engine}") from None

    params = {"q": query}
    if engine == "google" and query_needs_recency(query):
        params["tbs"] = "qdr:m"
    return f"{base}?{urlencode(params)}"
