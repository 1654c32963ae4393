"""Configuration module for deep research."""

from deep_research.config.factory import (
    create_browser,
    create_engine,
    create_from_config,
    create_model_client,
    create_search_backend,
)
from deep_research.config.loader import get_default_config_path, load_config
from deep_research.config.models import (
    BrowserSearchBackendConfig,
    ClaudeModelConfig,
    DeepResearchConfig,
    HttpxBrowserConfig,
    LoggingConfig,
    ResearchAppConfig,
)

__all__ = [
    # Models
    "BrowserSearchBackendConfig",
    "ClaudeModelConfig",
    "DeepResearchConfig",
    "HttpxBrowserConfig",
    "LoggingConfig",
    "ResearchAppConfig",
    # Loading
    "get_default_config_path",
    "load_config",
    # Factory
    "create_browser",
    "create_engine",
    "create_from_config",
    "create_model_client",
    "create_search_backend",
]
