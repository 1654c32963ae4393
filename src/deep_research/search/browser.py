"""Web search by driving a page surface to a search engine's result page."""

import asyncio
import logging
from urllib.parse import parse_qs, urlparse

from bs4 import BeautifulSoup, Tag

from deep_research.browser.base import PageBrowser
from deep_research.data import SearchResultItem
from deep_research.query.sanitize import build_search_url, sanitize_search_query
from deep_research.url import extract_domain

logger = logging.getLogger(__name__)

VIDEO_URL_MARKERS: tuple[str, ...] = (
    "youtube.com",
    "youtu.be",
    "vimeo.com",
    "dailymotion.com",
    "twitch.tv",
    "tiktok.com",
    "instagram.com/reel",
    "facebook.com/watch",
    "netflix.com",
    "hulu.com",
    "amazon.com/prime",
    "disney.com",
    "hbo.com",
    "paramount.com",
)

# Hosts whose links on a result page are navigation, not results.
ENGINE_HOST_MARKERS: tuple[str, ...] = (
    "google.",
    "gstatic.com",
    "bing.com",
    "microsoft.com",
    "msn.com",
    "duckduckgo.com",
)

RESULT_BLOCK_TAGS: tuple[str, ...] = ("div", "li", "article", "td", "section")
MAX_SNIPPET_CHARS = 300


def is_video_url(url: str) -> bool:
    lowered = url.lower()
    return any(marker in lowered for marker in VIDEO_URL_MARKERS)


def _unwrap_redirect(href: str) -> str:
    """Resolve engine redirect links (``/url?q=`` and ``uddg=``) to their target."""
    if href.startswith("//"):
        href = "https:" + href
    parsed = urlparse(href)
    params = parse_qs(parsed.query)
    if parsed.path == "/url" and "q" in params:
        return params["q"][0]
    if "uddg" in params:
        return params["uddg"][0]
    return href


def _result_url(href: str) -> str | None:
    url = _unwrap_redirect(href)
    if not url.startswith(("http://", "https://")):
        return None
    domain = extract_domain(url)
    if any(marker in domain for marker in ENGINE_HOST_MARKERS):
        return None
    return url


def _result_snippet(anchor: Tag, url: str, title: str) -> str:
    """Text of the closest block around ``anchor`` that belongs to this result alone."""
    for block in anchor.parents:
        if block.name in ("body", "html", "[document]"):
            break
        if block.name not in RESULT_BLOCK_TAGS:
            continue
        linked = {_result_url(str(a["href"])) for a in block.find_all("a", href=True)}
        if linked - {url, None}:
            break
        text = " ".join(block.get_text(" ").split())
        snippet = text.replace(title, "", 1).strip()
        if snippet:
            return snippet[:MAX_SNIPPET_CHARS]
    return ""


def parse_result_links(html: str) -> list[SearchResultItem]:
    """Extract outbound result links from a search result page."""
    seen: set[str] = set()
    items: list[SearchResultItem] = []
    for anchor in BeautifulSoup(html, "html.parser").find_all("a", href=True):
        url = _result_url(str(anchor["href"]))
        if url is None:
            continue
        title = anchor.get_text(" ", strip=True)
        if not title or url in seen:
            continue
        seen.add(url)
        items.append(
            SearchResultItem(url=url, title=title, snippet=_result_snippet(anchor, url, title))
        )
    return items


class BrowserSearchBackend:
    """Search by navigating a page surface to a search engine.

    Concurrent searches take turns on the shared page surface.

    Args:
        browser: Page surface used for the result page.
        engine: ``google``, ``bing`` or ``duckduckgo``.
        settle_seconds: Wait after navigation before reading the page.
    """

    def __init__(
        self,
        browser: PageBrowser,
        *,
        engine: str = "google",
        settle_seconds: float = 2.0,
    ) -> None:
        self._browser = browser
        self._engine = engine
        self._settle_seconds = settle_seconds
        self._lock = asyncio.Lock()

    async def search(self, query: str) -> list[SearchResultItem]:
        cleaned = sanitize_search_query(query)
        async with self._lock:
            await self._browser.navigate(build_search_url(cleaned, self._engine))
            if self._settle_seconds > 0:
                await asyncio.sleep(self._settle_seconds)
            page = await self._browser.extract_content()

        results: list[SearchResultItem] = []
        for item in parse_result_links(page.html):
            if is_video_url(item.url):
                logger.debug("Filtered out video URL: %s", item.url)
                continue
            results.append(
                SearchResultItem(
                    url=item.url,
                    title=item.title,
                    snippet=item.snippet,
                    position=len(results) + 1,
                    query=cleaned,
                )
            )
        logger.info("Search %r returned %d results", cleaned, len(results))
        return results
