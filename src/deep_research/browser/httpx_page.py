"""Static page surface backed by httpx."""

import logging
from typing import Any, Self

import httpx

from deep_research.browser.base import PageContent, PageInfo
from deep_research.cleaning import element_text, parse_html, remove_tags
from deep_research.errors import PageFetchFailure

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)

INVISIBLE_TAGS = ("script", "style", "noscript", "template")


class HttpxPageBrowser:
    """Page surface that downloads markup without rendering it.

    There is no script engine, so ``run_script`` always returns None and the
    retriever falls back to cleaning the downloaded markup.

    Args:
        timeout: Per-request timeout in seconds.
        user_agent: User-Agent header sent with every request.
        client: Pre-configured client (mainly for tests).
    """

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            follow_redirects=True,
            timeout=timeout,
            headers={"User-Agent": user_agent, "Accept-Language": "en-US,en;q=0.9"},
        )
        self._url = ""
        self._html = ""

    async def navigate(self, url: str) -> None:
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            self._url = ""
            self._html = ""
            raise PageFetchFailure(f"Failed to load {url}: {e}") from e
        self._url = str(response.url)
        self._html = response.text

    async def extract_content(self) -> PageContent:
        soup = parse_html(self._html)
        remove_tags(soup, INVISIBLE_TAGS)
        return PageContent(text=element_text(soup), html=self._html)

    async def get_page_info(self) -> PageInfo:
        title = parse_html(self._html).title
        return PageInfo(title=title.get_text(strip=True) if title else "", url=self._url)

    async def run_script(self, script: str) -> Any:
        return None

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
