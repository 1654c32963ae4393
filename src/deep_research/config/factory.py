"""Factory functions to create components from configuration."""

from pathlib import Path

from deep_research.browser.base import PageBrowser
from deep_research.browser.httpx_page import HttpxPageBrowser
from deep_research.config.models import (
    BrowserConfig,
    BrowserSearchBackendConfig,
    ClaudeModelConfig,
    DeepResearchConfig,
    HttpxBrowserConfig,
    ModelConfig,
    ResearchAppConfig,
    SearchBackendConfig,
)
from deep_research.evaluation.evaluator import SourceEvaluator
from deep_research.gaps.analyzer import GapAnalyzer
from deep_research.llm import ClaudeModelClient, ModelClient
from deep_research.pipeline.engine import DeepResearchEngine
from deep_research.query.decomposer import ModelQueryDecomposer
from deep_research.retrieval.cache import ContentCache
from deep_research.retrieval.retriever import PageRetriever
from deep_research.run_logger import RunLogger
from deep_research.search.base import SearchBackend
from deep_research.search.browser import BrowserSearchBackend
from deep_research.search.parallel import ParallelSearcher
from deep_research.synthesis.synthesizer import Synthesizer
from deep_research.verification.cross_reference import CrossReferencer


def create_model_client(config: ModelConfig) -> ModelClient:
    """Create a model client from config.

    Uses explicit type matching rather than getattr.
    """
    if isinstance(config, ClaudeModelConfig):
        return ClaudeModelClient()
    msg = f"Unknown model config type: {type(config)}"
    raise ValueError(msg)


def create_browser(config: BrowserConfig) -> HttpxPageBrowser:
    """Create a page surface from config."""
    if isinstance(config, HttpxBrowserConfig):
        return HttpxPageBrowser(timeout=config.timeout, user_agent=config.user_agent)
    msg = f"Unknown browser config type: {type(config)}"
    raise ValueError(msg)


def create_search_backend(config: SearchBackendConfig, browser: PageBrowser) -> SearchBackend:
    """Create a search backend from config."""
    if isinstance(config, BrowserSearchBackendConfig):
        return BrowserSearchBackend(
            browser,
            engine=config.engine,
            settle_seconds=config.settle_seconds,
        )
    msg = f"Unknown search backend config type: {type(config)}"
    raise ValueError(msg)


def create_engine(
    config: DeepResearchConfig,
    *,
    client: ModelClient,
    browser: PageBrowser,
    search_backend: SearchBackend,
    search_concurrency: int = 3,
    run_logger: RunLogger | None = None,
) -> DeepResearchEngine:
    """Wire every research component around the given collaborators."""
    return DeepResearchEngine(
        decomposer=ModelQueryDecomposer(client, model=config.model),
        searcher=ParallelSearcher(search_backend, max_concurrent=search_concurrency),
        retriever=PageRetriever(
            browser,
            cache=ContentCache(ttl_seconds=config.cache_ttl_seconds),
            max_concurrent=config.concurrency,
            page_timeout_seconds=config.page_timeout_seconds,
            settle_seconds=config.page_settle_seconds,
        ),
        evaluator=SourceEvaluator(client, model=config.model, max_concurrent=config.concurrency),
        gap_analyzer=GapAnalyzer(client, model=config.model),
        cross_referencer=CrossReferencer(),
        synthesizer=Synthesizer(client, model=config.model),
        max_sub_questions=config.max_sub_questions,
        max_searches_per_question=config.max_searches_per_question,
        max_pages_to_fetch=config.max_pages_to_fetch,
        max_follow_up_searches=config.max_follow_up_searches,
        run_logger=run_logger,
    )


def create_from_config(
    config: ResearchAppConfig,
    *,
    log_override: bool | None = None,
    log_dir_override: str | None = None,
) -> tuple[DeepResearchEngine, HttpxPageBrowser, RunLogger | None]:
    """Create a complete research engine from root config.

    Args:
        config: Root configuration.
        log_override: Override the config's logging.enabled setting.
        log_dir_override: Override the config's logging.log_dir setting.

    Returns:
        Tuple of (engine, browser, run_logger). The caller owns the browser
        and must close it. run_logger is None if logging is disabled.
    """
    log_enabled = log_override if log_override is not None else config.logging.enabled
    log_dir = Path(log_dir_override if log_dir_override is not None else config.logging.log_dir)

    run_logger: RunLogger | None = None
    if log_enabled:
        run_logger = RunLogger(log_dir=log_dir, enabled=True)

    client = create_model_client(config.model)
    browser = create_browser(config.browser)
    engine = create_engine(
        config.research,
        client=client,
        browser=browser,
        search_backend=create_search_backend(config.search, browser),
        search_concurrency=config.search.max_concurrent,
        run_logger=run_logger,
    )
    return (engine, browser, run_logger)
