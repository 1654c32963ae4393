"""Deep Research: multi-phase web research with cited, cross-checked answers."""

from deep_research.browser import HttpxPageBrowser, PageBrowser, TabPool
from deep_research.config import ResearchAppConfig, create_from_config, load_config
from deep_research.data import (
    ConfidenceLevel,
    ExtractedContent,
    ExtractedFact,
    Gap,
    Importance,
    PhaseStats,
    Priority,
    ResearchResult,
    ResearchStats,
    SearchResultItem,
    SourceEvaluation,
    SourceReference,
    SubQuestion,
    SubQuestionCategory,
    TableData,
    VerifiedFact,
)
from deep_research.errors import PageFetchFailure, PageSurfaceCrash, ParseFailure, ResearchError
from deep_research.evaluation import Evaluator, SourceEvaluator
from deep_research.gaps import GapAnalyzer, GapFinder
from deep_research.llm import ClaudeModelClient, ModelClient
from deep_research.pipeline import DeepResearchEngine, ResearchPipeline
from deep_research.query import ModelQueryDecomposer, QueryDecomposer, sanitize_search_query
from deep_research.retrieval import ContentCache, PageRetriever, Retriever
from deep_research.run_logger import RunLogger
from deep_research.search import BrowserSearchBackend, ParallelSearcher, SearchBackend, Searcher
from deep_research.synthesis import Synthesizer
from deep_research.url import extract_domain
from deep_research.verification import CrossReferencer

__all__ = [
    # Models
    "ConfidenceLevel",
    "ExtractedContent",
    "ExtractedFact",
    "Gap",
    "Importance",
    "PhaseStats",
    "Priority",
    "ResearchResult",
    "ResearchStats",
    "SearchResultItem",
    "SourceEvaluation",
    "SourceReference",
    "SubQuestion",
    "SubQuestionCategory",
    "TableData",
    "VerifiedFact",
    # Errors
    "PageFetchFailure",
    "PageSurfaceCrash",
    "ParseFailure",
    "ResearchError",
    # Functions
    "extract_domain",
    "sanitize_search_query",
    # Protocols
    "Evaluator",
    "GapFinder",
    "ModelClient",
    "PageBrowser",
    "QueryDecomposer",
    "ResearchPipeline",
    "Retriever",
    "SearchBackend",
    "Searcher",
    "TabPool",
    # Collaborators
    "ClaudeModelClient",
    "HttpxPageBrowser",
    # Components
    "BrowserSearchBackend",
    "ContentCache",
    "CrossReferencer",
    "GapAnalyzer",
    "ModelQueryDecomposer",
    "PageRetriever",
    "ParallelSearcher",
    "SourceEvaluator",
    "Synthesizer",
    # Pipelines
    "DeepResearchEngine",
    # Logging
    "RunLogger",
    # Config
    "ResearchAppConfig",
    "create_from_config",
    "load_config",
]
