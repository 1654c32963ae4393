"""Core data models for deep research runs."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


class SubQuestionCategory(StrEnum):
    """Facet of the user's question a sub-question covers."""

    PRICING = "pricing"
    FEATURES = "features"
    COMPARISON = "comparison"
    FACTS = "facts"
    OPINIONS = "opinions"
    NEWS = "news"


class Priority(StrEnum):
    """Relative importance of a sub-question."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Importance(StrEnum):
    """How badly a gap needs filling.

    Only ``CRITICAL`` gaps may trigger a follow-up search round.
    """

    CRITICAL = "critical"
    IMPORTANT = "important"
    NICE_TO_HAVE = "nice-to-have"


class ConfidenceLevel(StrEnum):
    """Confidence tier for verified facts and for the overall answer."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class SubQuestion:
    """One independently searchable facet of the user's question."""

    id: str
    question: str
    category: SubQuestionCategory
    priority: Priority
    search_query: str


@dataclass(frozen=True)
class SearchResultItem:
    """A single search-engine hit.

    ``position`` and ``query`` record which query produced the hit and at
    which rank (1-based); both are filled in by the searcher.
    """

    url: str
    title: str = ""
    snippet: str = ""
    position: int = 0
    query: str = ""


@dataclass(frozen=True)
class TableData:
    """A data table lifted out of page markup."""

    headers: tuple[str, ...] = ()
    rows: tuple[tuple[str, ...], ...] = ()
    context: str = ""


@dataclass(frozen=True)
class ExtractedContent:
    """Readable content of a fetched page."""

    url: str
    title: str
    domain: str
    main_content: str
    fetched_at: datetime
    publish_date: datetime | None = None
    tables: tuple[TableData, ...] = ()
    headings: tuple[str, ...] = ()
    word_count: int = 0


@dataclass(frozen=True)
class ExtractedFact:
    """A claim extracted from a page by the model.

    ``confidence`` is ``None`` when the model did not supply one.
    """

    claim: str
    source_url: str
    value: str | None = None
    context: str = ""
    confidence: int | None = None
    category: str = "claim"


@dataclass(frozen=True)
class SourceEvaluation:
    """Scores and validated facts for one retrieved page."""

    url: str
    domain: str
    authority_score: int
    recency_score: int
    relevance_score: int
    overall_score: int
    extracted_facts: tuple[ExtractedFact, ...]
    content: ExtractedContent


@dataclass(frozen=True)
class Gap:
    """Information judged missing or conflicting after evaluation."""

    sub_question_id: str
    description: str
    suggested_query: str
    importance: Importance = Importance.IMPORTANT


@dataclass(frozen=True)
class SourceReference:
    """A citable source backing a verified fact."""

    url: str
    domain: str
    title: str = ""
    authority_score: int = 50
    exact_quote: str | None = None


@dataclass(frozen=True)
class VerifiedFact:
    """A fact merged across one or more sources."""

    claim: str
    sources: tuple[SourceReference, ...]
    confidence: ConfidenceLevel
    value: str | None = None
    agreement_count: int = 1
    conflicting_info: str | None = None

    def __post_init__(self) -> None:
        if not self.sources:
            raise ValueError("VerifiedFact requires at least one source")


@dataclass(frozen=True)
class PhaseStats:
    """Timing and volume of one pipeline phase."""

    name: str
    duration_ms: float
    items_processed: int


@dataclass
class ResearchStats:
    """Accumulated statistics for a research run."""

    total_searches: int = 0
    pages_analyzed: int = 0
    facts_extracted: int = 0
    facts_verified: int = 0
    total_time_ms: float = 0.0
    phases: list[PhaseStats] = field(default_factory=list)

    def record(self, name: str, duration_ms: float, items_processed: int) -> PhaseStats:
        phase = PhaseStats(name=name, duration_ms=duration_ms, items_processed=items_processed)
        self.phases.append(phase)
        return phase


@dataclass
class ResearchResult:
    """Final output of a research run."""

    response: str
    sources: list[SourceReference]
    verified_facts: list[VerifiedFact]
    gaps: list[Gap]
    confidence: ConfidenceLevel
    follow_up_questions: list[str]
    stats: ResearchStats
