from deep_research.browser.base import PageBrowser, PageContent, PageInfo, TabHandle, TabPool
from deep_research.browser.httpx_page import HttpxPageBrowser
from deep_research.browser.scripts import PAGE_HTML_SCRIPT, POPUP_DISMISS_SCRIPT

__all__ = [
    "HttpxPageBrowser",
    "PAGE_HTML_SCRIPT",
    "POPUP_DISMISS_SCRIPT",
    "PageBrowser",
    "PageContent",
    "PageInfo",
    "TabHandle",
    "TabPool",
]
