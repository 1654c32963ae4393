"""Authority, recency and relevance scores for a retrieved page."""

from datetime import UTC, datetime

from deep_research.data import ExtractedContent, SubQuestion

DOMAIN_AUTHORITY: dict[str, int] = {
    # official sources
    "openai.com": 100,
    "anthropic.com": 100,
    "cloud.google.com": 100,
    "azure.microsoft.com": 100,
    "aws.amazon.com": 100,
    # publications
    "reuters.com": 90,
    "bloomberg.com": 90,
    "techcrunch.com": 85,
    "theverge.com": 85,
    "wired.com": 85,
    "arstechnica.com": 85,
    # developer resources
    "github.com": 80,
    "stackoverflow.com": 75,
    "dev.to": 65,
    "medium.com": 60,
    # user-generated
    "reddit.com": 50,
    "quora.com": 45,
    "twitter.com": 40,
    "x.com": 40,
}
DEFAULT_AUTHORITY = 50

# (max age in days, score), checked in order.
RECENCY_BUCKETS: tuple[tuple[int, int], ...] = (
    (7, 100),
    (30, 90),
    (90, 75),
    (180, 60),
    (365, 45),
    (730, 30),
)
OLDEST_RECENCY = 15
UNKNOWN_RECENCY = 50

AUTHORITY_WEIGHT = 0.35
RECENCY_WEIGHT = 0.30
RELEVANCE_WEIGHT = 0.35

MIN_KEYWORD_LENGTH = 4
KEYWORD_HIT_CAP = 10


def authority_score(domain: str) -> int:
    """Reputation of a domain: exact match, then subdomain of a known domain."""
    domain = domain.lower().removeprefix("www.")
    if domain in DOMAIN_AUTHORITY:
        return DOMAIN_AUTHORITY[domain]
    for known, score in DOMAIN_AUTHORITY.items():
        if domain.endswith(f".{known}"):
            return score
    return DEFAULT_AUTHORITY


def recency_score(publish_date: datetime | None, now: datetime | None = None) -> int:
    if publish_date is None:
        return UNKNOWN_RECENCY
    now = now or datetime.now(tz=UTC)
    if publish_date.tzinfo is None:
        publish_date = publish_date.replace(tzinfo=UTC)
    age_days = (now - publish_date).total_seconds() / 86400
    for max_days, score in RECENCY_BUCKETS:
        if age_days < max_days:
            return score
    return OLDEST_RECENCY


def relevance_score(content: ExtractedContent, sub_questions: list[SubQuestion]) -> int:
    """Keyword overlap between the sub-questions' search queries and the page.

    60% comes from the share of sub-questions with at least half their
    keywords present, 40% from the total keyword hits capped at 10.
    """
    body = content.main_content.lower()
    title = content.title.lower()

    matched_questions = 0
    total_hits = 0
    for sq in sub_questions:
        keywords = [w for w in sq.search_query.lower().split() if len(w) >= MIN_KEYWORD_LENGTH]
        hits = sum(1 for keyword in keywords if keyword in body or keyword in title)
        total_hits += hits
        if hits >= len(keywords) * 0.5:
            matched_questions += 1

    coverage = matched_questions / len(sub_questions) if sub_questions else 0.0
    keyword_score = min(total_hits / KEYWORD_HIT_CAP, 1.0)
    return round(coverage * 60 + keyword_score * 40)


def overall_score(authority: int, recency: int, relevance: int) -> int:
    return round(
        authority * AUTHORITY_WEIGHT + recency * RECENCY_WEIGHT + relevance * RELEVANCE_WEIGHT
    )
