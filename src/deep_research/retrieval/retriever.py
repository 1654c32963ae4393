"""Fetch candidate pages and turn them into ``ExtractedContent``."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

from deep_research.browser.base import PageBrowser, TabHandle, TabPool
from deep_research.browser.scripts import PAGE_HTML_SCRIPT, POPUP_DISMISS_SCRIPT
from deep_research.cleaning import (
    BROWSER_EXTRACTION_SCRIPT,
    clean_html_content,
    is_valid_content,
    parse_html,
)
from deep_research.data import ExtractedContent, SearchResultItem
from deep_research.errors import PageFetchFailure, PageSurfaceCrash, is_surface_crash
from deep_research.retrieval.cache import ContentCache
from deep_research.retrieval.extract import (
    extract_headings,
    extract_publish_date,
    extract_tables,
    normalize_text,
    truncate_content,
)
from deep_research.retry import Outcome
from deep_research.url import extract_domain, unique_urls

logger = logging.getLogger(__name__)

MIN_SCRIPT_CHARS = 500
MAX_PLAIN_TEXT_CHARS = 10000
BLANK_URLS = frozenset({"", "about:blank"})


def build_content(
    url: str,
    title: str,
    *,
    script_text: str,
    html: str,
    text: str = "",
) -> ExtractedContent:
    """Assemble page content from whatever the surface produced.

    In-page extraction wins when it yields at least ``MIN_SCRIPT_CHARS``;
    otherwise the markup is cleaned, and plain text is the last resort.

    Raises:
        PageFetchFailure: If nothing usable was extracted.
    """
    main = script_text
    if len(main) < MIN_SCRIPT_CHARS:
        if html:
            main = clean_html_content(html)
        elif text:
            main = truncate_content(normalize_text(text), MAX_PLAIN_TEXT_CHARS)
        else:
            raise PageFetchFailure(f"No content extracted from {url}")

    if not is_valid_content(main):
        raise PageFetchFailure(f"Content validation failed for {url}")

    soup = parse_html(html)
    publish_date = extract_publish_date(soup, main)
    main = truncate_content(main)
    return ExtractedContent(
        url=url,
        title=title,
        domain=extract_domain(url),
        main_content=main,
        fetched_at=datetime.now(tz=UTC),
        publish_date=publish_date,
        tables=tuple(extract_tables(soup)),
        headings=tuple(extract_headings(soup)),
        word_count=len(main.split()),
    )


class PageRetriever:
    """Fetch pages with a per-page timeout, caching what succeeds.

    With a ``tab_pool`` and ``session_id`` pages are fetched in parallel
    background tabs, ``max_concurrent`` at a time; otherwise they are fetched
    one after another through ``browser``. Pages that time out, come back
    blank, fail validation or crash the surface are dropped.

    Args:
        browser: Page surface for sequential fetching.
        cache: Content cache; a private 5-minute cache when omitted.
        tab_pool: Optional background-tab capability.
        session_id: Session owning the background tabs.
        max_concurrent: Batch size in tab mode.
        page_timeout_seconds: Upper bound for one page fetch.
        settle_seconds: Wait after navigation before reading the page.
    """

    def __init__(
        self,
        browser: PageBrowser,
        *,
        cache: ContentCache | None = None,
        tab_pool: TabPool | None = None,
        session_id: str | None = None,
        max_concurrent: int = 5,
        page_timeout_seconds: float = 8.0,
        settle_seconds: float = 1.0,
    ) -> None:
        self._browser = browser
        self._cache = cache if cache is not None else ContentCache()
        self._tab_pool = tab_pool
        self._session_id = session_id
        self._max_concurrent = max(1, max_concurrent)
        self._timeout = page_timeout_seconds
        self._settle_seconds = settle_seconds

    @property
    def cache(self) -> ContentCache:
        return self._cache

    async def retrieve_all(
        self, results: list[SearchResultItem], max_pages: int = 20
    ) -> list[ExtractedContent]:
        """Fetch up to ``max_pages`` distinct URLs from ``results``.

        Returns:
            Extracted pages in URL order; shorter than the input when pages fail.
        """
        t0 = time.monotonic()
        urls = unique_urls([r.url for r in results])[:max_pages]

        if self._tab_pool is not None and self._session_id:
            logger.info("Fetching %d pages (parallel: %d)", len(urls), self._max_concurrent)
            contents = await self._retrieve_with_tabs(urls, self._tab_pool, self._session_id)
        else:
            logger.info("Fetching %d pages sequentially", len(urls))
            contents = await self._retrieve_sequential(urls)

        logger.info(
            "Retrieved %d/%d pages in %.0fms",
            len(contents),
            len(urls),
            (time.monotonic() - t0) * 1000,
        )
        return contents

    async def _retrieve_sequential(self, urls: list[str]) -> list[ExtractedContent]:
        contents: list[ExtractedContent] = []
        for url in urls:
            cached = self._cache.get(url)
            if cached is not None:
                contents.append(cached)
                continue
            try:
                content = await asyncio.wait_for(self.fetch_and_extract(url), self._timeout)
            except Exception as e:
                self._log_drop(url, e)
                continue
            contents.append(content)
            self._cache.put(content)
        return contents

    async def _retrieve_with_tabs(
        self, urls: list[str], pool: TabPool, session_id: str
    ) -> list[ExtractedContent]:
        found: dict[str, ExtractedContent] = {}
        to_fetch: list[str] = []
        for url in urls:
            cached = self._cache.get(url)
            if cached is not None:
                found[url] = cached
            else:
                to_fetch.append(url)

        for start in range(0, len(to_fetch), self._max_concurrent):
            batch = to_fetch[start : start + self._max_concurrent]
            outcomes = await asyncio.gather(
                *(self._fetch_with_tab(url, pool, session_id) for url in batch),
                return_exceptions=True,
            )
            for url, outcome in zip(batch, outcomes, strict=True):
                if isinstance(outcome, BaseException):
                    self._log_drop(url, outcome)
                    continue
                found[url] = outcome
                self._cache.put(outcome)
        return [found[url] for url in urls if url in found]

    @staticmethod
    def _log_drop(url: str, error: BaseException) -> None:
        if isinstance(error, TimeoutError):
            logger.warning("Timeout for %s, skipping", url)
        elif is_surface_crash(error):
            logger.error("Page surface crashed while extracting %s: %s", url, error)
        else:
            logger.warning("Skipped %s: %s", url, error)

    async def fetch_and_extract(self, url: str) -> ExtractedContent:
        """Fetch one page through the shared page surface.

        Raises:
            PageFetchFailure: If the page is blank or has no usable content.
            PageSurfaceCrash: If the surface crashed; never absorbed here.
        """
        await self._browser.navigate(url)
        if self._settle_seconds > 0:
            await asyncio.sleep(self._settle_seconds)

        await self._dismiss_popups(self._browser.run_script, url)

        info = await self._browser.get_page_info()
        if info.url in BLANK_URLS:
            raise PageFetchFailure(f"Page did not load properly for {url}")

        script_text = await self._run_extraction(self._browser.run_script)
        page = await self._browser.extract_content()
        return build_content(
            url, info.title, script_text=script_text, html=page.html, text=page.text
        )

    async def _fetch_with_tab(self, url: str, pool: TabPool, session_id: str) -> ExtractedContent:
        opened: list[TabHandle] = []

        async def open_and_extract() -> ExtractedContent:
            tab = await pool.create_background_tab(session_id, url)
            opened.append(tab)
            return await self._extract_from_tab(pool, tab, url)

        try:
            return await asyncio.wait_for(open_and_extract(), self._timeout)
        finally:
            for tab in opened:
                try:
                    await pool.close_tab(tab)
                except Exception as e:
                    logger.warning("Failed to close tab %s: %s", tab.id, e)

    async def _extract_from_tab(self, pool: TabPool, tab: TabHandle, url: str) -> ExtractedContent:
        if self._settle_seconds > 0:
            await asyncio.sleep(self._settle_seconds)

        async def run_in_tab(script: str) -> Any:
            return await pool.run_script(tab, script)

        await self._dismiss_popups(run_in_tab, url)

        state = await pool.get_tab_state(tab)
        if state is None or state.url in BLANK_URLS:
            raise PageFetchFailure(f"Tab did not load properly for {url}")

        script_text = await self._run_extraction(run_in_tab)
        html = await run_in_tab(PAGE_HTML_SCRIPT)
        return build_content(
            url, state.title, script_text=script_text, html=html if isinstance(html, str) else ""
        )

    async def _dismiss_popups(
        self, run_script: Callable[[str], Awaitable[Any]], url: str
    ) -> None:
        outcome = await dismiss_popups(run_script)
        if outcome.error is not None:
            if is_surface_crash(outcome.error):
                raise PageSurfaceCrash(f"Surface crashed while loading {url}") from outcome.error
            logger.debug("Pop-up dismissal failed on %s: %s", url, outcome.error)
            return
        if outcome.value and self._settle_seconds > 0:
            logger.debug("Closed %d pop-up(s) on %s", outcome.value, url)
            await asyncio.sleep(min(0.5, self._settle_seconds))

    @staticmethod
    async def _run_extraction(run_script: Callable[[str], Awaitable[Any]]) -> str:
        try:
            result = await run_script(BROWSER_EXTRACTION_SCRIPT)
        except Exception as e:
            if is_surface_crash(e):
                raise PageSurfaceCrash(str(e)) from e
            logger.debug("In-page extraction failed, falling back to markup: %s", e)
            return ""
        return result if isinstance(result, str) else ""


async def dismiss_popups(run_script: Callable[[str], Awaitable[Any]]) -> Outcome[int]:
    """Try to close overlays on the current page.

    Returns:
        The number of closed overlays, or the error the attempt hit.
    """
    try:
        result = await run_script(POPUP_DISMISS_SCRIPT)
    except Exception as e:
        return Outcome(error=e)
    closed = result.get("closed", 0) if isinstance(result, dict) else 0
    return Outcome(value=int(closed or 0))
