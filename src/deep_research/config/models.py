"""Pydantic configuration models for deep research components."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from deep_research.browser.httpx_page import DEFAULT_USER_AGENT
from deep_research.llm import DEFAULT_MODEL

# ============================================================
# Model Configs
# ============================================================


class ClaudeModelConfig(BaseModel):
    """Configuration for ClaudeModelClient.

    The API key is read from the ``CLAUDE_API_KEY`` environment variable.
    """

    type: Literal["claude"] = "claude"

    model_config = {"frozen": True}


ModelConfig = Annotated[
    ClaudeModelConfig,
    Field(discriminator="type"),
]


# ============================================================
# Browser Configs
# ============================================================


class HttpxBrowserConfig(BaseModel):
    """Configuration for HttpxPageBrowser."""

    type: Literal["httpx"] = "httpx"
    timeout: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT

    model_config = {"frozen": True}


BrowserConfig = Annotated[
    HttpxBrowserConfig,
    Field(discriminator="type"),
]


# ============================================================
# Search Backend Configs
# ============================================================


class BrowserSearchBackendConfig(BaseModel):
    """Configuration for BrowserSearchBackend."""

    type: Literal["browser"] = "browser"
    engine: Literal["google", "bing", "duckduckgo"] = "duckduckgo"
    settle_seconds: float = 0.0
    max_concurrent: int = Field(default=3, ge=1)

    model_config = {"frozen": True}


SearchBackendConfig = Annotated[
    BrowserSearchBackendConfig,
    Field(discriminator="type"),
]


# ============================================================
# Research Config
# ============================================================


class DeepResearchConfig(BaseModel):
    """Limits and tuning for DeepResearchEngine and its components."""

    max_sub_questions: int = Field(default=8, ge=1)
    max_searches_per_question: int = Field(default=3, ge=1)
    max_pages_to_fetch: int = Field(default=20, ge=1)
    max_follow_up_searches: int = Field(default=5, ge=0)
    model: str = DEFAULT_MODEL
    concurrency: int = Field(default=5, ge=1)
    page_timeout_seconds: float = Field(default=8.0, gt=0)
    page_settle_seconds: float = Field(default=0.0, ge=0)
    cache_ttl_seconds: float = Field(default=300.0, ge=0)

    model_config = {"frozen": True}


# ============================================================
# Logging Config
# ============================================================


class LoggingConfig(BaseModel):
    """Configuration for intermediate research phase logging."""

    enabled: bool = False
    log_dir: str = "logs"

    model_config = {"frozen": True}


# ============================================================
# Root Config
# ============================================================


class ResearchAppConfig(BaseModel):
    """Root configuration for deep research."""

    research: DeepResearchConfig = Field(default_factory=DeepResearchConfig)
    model: ModelConfig = Field(default_factory=ClaudeModelConfig)
    browser: BrowserConfig = Field(default_factory=HttpxBrowserConfig)
    search: SearchBackendConfig = Field(default_factory=BrowserSearchBackendConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}
