"""URL handling utilities."""

from __future__ import annotations

import logging
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


def extract_domain(url: str) -> str:
    """Extract the host name from a URL.

    Args:
        url: The URL to extract the domain from.

    Returns:
        The lower-cased host name (without 'www.' prefix), or "unknown" if
        extraction fails.
    """
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return "unknown"
    if not hostname:
        logger.warning(f"Could not get domain from url {url}")
        return "unknown"
    if hostname.startswith("www."):
        hostname = hostname[4:]
    return hostname


def unique_urls(urls: list[str]) -> list[str]:
    """Drop repeated and empty URLs, keeping first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for url in urls:
        if url and url not in seen:
            seen.add(url)
            result.append(url)
    return result
