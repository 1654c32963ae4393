"""Metadata extraction from page markup: tables, headings, publish dates."""

import json
import logging
import re
from datetime import UTC, datetime
from typing import Any

from bs4 import BeautifulSoup, Tag

from deep_research.cleaning import parse_html
from deep_research.data import TableData

logger = logging.getLogger(__name__)

MAX_CONTENT_CHARS = 8000
MAX_HEADINGS = 20

_NAV_HEADING_RE = re.compile(r"^(?:menu|nav|share|follow|related)", re.IGNORECASE)
_WS_RE = re.compile(r"\s+")

# (attribute, value) pairs identifying publish-date <meta> tags, in priority order.
PUBLISH_DATE_META: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("property", re.compile(r"^article:published_time$", re.IGNORECASE)),
    ("name", re.compile(r"^date$", re.IGNORECASE)),
    ("name", re.compile(r"^publish[_-]?date$", re.IGNORECASE)),
)
_TEXT_DATE_RE = re.compile(r"published:?\s*(\w+\s+\d{1,2},?\s+\d{4})", re.IGNORECASE)

_TEXT_DATE_FORMATS = ("%B %d, %Y", "%B %d %Y", "%b %d, %Y", "%b %d %Y")

Markup = str | BeautifulSoup | Tag


def _soup(html: Markup) -> BeautifulSoup | Tag:
    return parse_html(html) if isinstance(html, str) else html


def normalize_text(text: str) -> str:
    """Collapse all whitespace runs to single spaces."""
    return _WS_RE.sub(" ", text).strip()


def _cell_text(element: Tag) -> str:
    return normalize_text(element.get_text(" "))


def extract_tables(html: Markup) -> list[TableData]:
    """Pull data tables out of markup, skipping layout tables and empty ones."""
    tables: list[TableData] = []
    for table in _soup(html).find_all("table"):
        classes = " ".join(table.get("class") or []).lower()
        if "layout" in classes:
            continue

        headers = [
            text for text in (_cell_text(h) for h in table.find_all("th")) if 0 < len(text) < 100
        ]
        rows: list[tuple[str, ...]] = []
        for row in table.find_all("tr"):
            cells = tuple(
                text for text in (_cell_text(c) for c in row.find_all("td")) if len(text) < 200
            )
            if any(cells):
                rows.append(cells)

        if (headers or len(rows) > 1) and any(len("".join(r)) > 10 for r in rows):
            tables.append(TableData(headers=tuple(headers), rows=tuple(rows)))
    return tables


def extract_headings(html: Markup) -> list[str]:
    """First ``MAX_HEADINGS`` h1-h3 headings that don't look like navigation."""
    headings: list[str] = []
    for element in _soup(html).find_all(["h1", "h2", "h3"]):
        text = _cell_text(element)
        if 3 < len(text) < 150 and not _NAV_HEADING_RE.match(text):
            headings.append(text)
    return headings[:MAX_HEADINGS]


def parse_date(value: str) -> datetime | None:
    """Parse an ISO-8601 or "March 3, 2024" style date; naive results are UTC."""
    value = value.strip()
    parsed: datetime | None = None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        cleaned = _WS_RE.sub(" ", value)
        for fmt in _TEXT_DATE_FORMATS:
            try:
                parsed = datetime.strptime(cleaned, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _walk_json_ld(data: Any, key: str) -> list[str]:
    if isinstance(data, dict):
        found = [data[key]] if isinstance(data.get(key), str) else []
        for value in data.values():
            found.extend(_walk_json_ld(value, key))
        return found
    if isinstance(data, list):
        return [v for item in data for v in _walk_json_ld(item, key)]
    return []


def _metadata_dates(soup: BeautifulSoup | Tag) -> list[str]:
    """Candidate publish dates from meta tags, <time> elements and JSON-LD."""
    candidates: list[str] = []
    for attr, pattern in PUBLISH_DATE_META:
        for meta in soup.find_all("meta", attrs={attr: pattern}):
            content = meta.get("content")
            if content:
                candidates.append(str(content))
    for time_tag in soup.find_all("time", datetime=True):
        candidates.append(str(time_tag["datetime"]))
    for script in soup.find_all("script", type="application/ld+json"):
        try:
            data = json.loads(script.string or "")
        except json.JSONDecodeError:
            continue
        candidates.extend(_walk_json_ld(data, "datePublished"))
    return candidates


def extract_publish_date(html: Markup, text: str = "") -> datetime | None:
    """Find the publish date in page metadata, falling back to the body text."""
    candidates = _metadata_dates(_soup(html)) if html else []
    if text:
        candidates.extend(_TEXT_DATE_RE.findall(text))
    for value in candidates:
        parsed = parse_date(value)
        if parsed is not None and parsed.year > 2000:
            return parsed
    return None


def truncate_content(content: str, max_length: int = MAX_CONTENT_CHARS) -> str:
    """Cut content to ``max_length`` chars.

    Ends on a sentence boundary when one falls in the last 20% of the budget,
    otherwise on a word boundary followed by ``...``.
    """
    if len(content) <= max_length:
        return content
    truncated = content[:max_length]
    last_sentence = truncated.rfind(". ")
    if last_sentence > max_length * 0.8:
        return truncated[: last_sentence + 1]
    last_space = truncated.rfind(" ")
    if last_space <= 0:
        return truncated + "..."
    return truncated[:last_space] + "..."
