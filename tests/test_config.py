"""Tests for configuration loading and factory functions."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from deep_research.browser import HttpxPageBrowser
from deep_research.config import (
    BrowserSearchBackendConfig,
    ClaudeModelConfig,
    DeepResearchConfig,
    HttpxBrowserConfig,
    LoggingConfig,
    ResearchAppConfig,
    create_browser,
    create_engine,
    create_from_config,
    create_model_client,
    create_search_backend,
    get_default_config_path,
    load_config,
)
from deep_research.llm import DEFAULT_MODEL, ClaudeModelClient
from deep_research.pipeline import DeepResearchEngine
from deep_research.run_logger import RunLogger
from deep_research.search import BrowserSearchBackend


@pytest.fixture(autouse=True)
def api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CLAUDE_API_KEY", "test-key")


def write_yaml(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(content)
    return path


class TestConfigModels:
    """Tests for Pydantic config models."""

    def test_research_config_defaults(self) -> None:
        config = DeepResearchConfig()
        assert config.max_sub_questions == 8
        assert config.max_searches_per_question == 3
        assert config.max_pages_to_fetch == 20
        assert config.max_follow_up_searches == 5
        assert config.model == DEFAULT_MODEL
        assert config.concurrency == 5

    def test_research_config_rejects_zero_pages(self) -> None:
        with pytest.raises(ValidationError):
            DeepResearchConfig(max_pages_to_fetch=0)

    def test_follow_ups_can_be_disabled(self) -> None:
        assert DeepResearchConfig(max_follow_up_searches=0).max_follow_up_searches == 0

    def test_search_backend_config_defaults(self) -> None:
        config = BrowserSearchBackendConfig()
        assert config.engine == "duckduckgo"
        assert config.max_concurrent == 3

    def test_unknown_engine_rejected(self) -> None:
        with pytest.raises(ValidationError):
            BrowserSearchBackendConfig(engine="altavista")  # type: ignore[arg-type]

    def test_configs_are_frozen(self) -> None:
        config = LoggingConfig()
        with pytest.raises(ValidationError):
            config.enabled = True  # type: ignore[misc]

    def test_root_config_defaults(self) -> None:
        config = ResearchAppConfig()
        assert isinstance(config.model, ClaudeModelConfig)
        assert isinstance(config.browser, HttpxBrowserConfig)
        assert isinstance(config.search, BrowserSearchBackendConfig)
        assert config.logging.enabled is False


class TestConfigLoader:
    """Tests for YAML config loading."""

    def test_load_config(self, tmp_path: Path) -> None:
        path = write_yaml(
            tmp_path,
            """
research:
  max_sub_questions: 4
  max_pages_to_fetch: 6
  model: claude-sonnet-4-20250514
browser:
  type: httpx
  timeout: 3.5
search:
  type: browser
  engine: google
logging:
  enabled: true
  log_dir: runs
""",
        )

        config = load_config(path)

        assert config.research.max_sub_questions == 4
        assert config.research.max_pages_to_fetch == 6
        assert config.research.max_searches_per_question == 3
        assert config.research.model == "claude-sonnet-4-20250514"
        assert config.browser.timeout == 3.5
        assert config.search.engine == "google"
        assert config.logging.enabled is True
        assert config.logging.log_dir == "runs"

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_config(write_yaml(tmp_path, "")) == ResearchAppConfig()

    def test_unknown_type_rejected(self, tmp_path: Path) -> None:
        path = write_yaml(tmp_path, "model:\n  type: gpt\n")
        with pytest.raises(ValidationError):
            load_config(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_get_default_config_path(self) -> None:
        path = get_default_config_path()
        assert path.name == "default.yaml"
        assert path.parent.name == "configs"

    def test_load_default_config(self) -> None:
        path = get_default_config_path()
        if path.exists():
            config = load_config(path)
            assert isinstance(config, ResearchAppConfig)
            assert config.research == DeepResearchConfig()


class TestFactoryFunctions:
    """Tests for component factory functions."""

    def test_create_model_client(self) -> None:
        assert isinstance(create_model_client(ClaudeModelConfig()), ClaudeModelClient)

    def test_create_browser(self) -> None:
        assert isinstance(create_browser(HttpxBrowserConfig(timeout=2.0)), HttpxPageBrowser)

    def test_create_search_backend(self) -> None:
        browser = create_browser(HttpxBrowserConfig())
        backend = create_search_backend(BrowserSearchBackendConfig(engine="bing"), browser)
        assert isinstance(backend, BrowserSearchBackend)

    def test_create_engine(self) -> None:
        browser = create_browser(HttpxBrowserConfig())
        engine = create_engine(
            DeepResearchConfig(),
            client=create_model_client(ClaudeModelConfig()),
            browser=browser,
            search_backend=create_search_backend(BrowserSearchBackendConfig(), browser),
        )
        assert isinstance(engine, DeepResearchEngine)

    def test_create_from_config(self) -> None:
        engine, browser, run_logger = create_from_config(ResearchAppConfig())
        assert isinstance(engine, DeepResearchEngine)
        assert isinstance(browser, HttpxPageBrowser)
        assert run_logger is None

    def test_create_from_config_with_logging(self) -> None:
        config = ResearchAppConfig(logging=LoggingConfig(enabled=True, log_dir="runs"))
        _, _, run_logger = create_from_config(config)
        assert isinstance(run_logger, RunLogger)
        assert run_logger.enabled

    def test_create_from_config_overrides(self, tmp_path: Path) -> None:
        _, _, run_logger = create_from_config(
            ResearchAppConfig(), log_override=True, log_dir_override=str(tmp_path)
        )
        assert isinstance(run_logger, RunLogger)

        config = ResearchAppConfig(logging=LoggingConfig(enabled=True))
        _, _, disabled = create_from_config(config, log_override=False)
        assert disabled is None
