import time
from collections.abc import Callable
from dataclasses import dataclass

from deep_research.data import ExtractedContent


@dataclass(frozen=True)
class _Entry:
    content: ExtractedContent
    stored_at: float


class ContentCache:
    """Per-URL cache of extracted pages with a fixed time-to-live.

    Entries are looked up by exact URL and evicted when read after expiry.
    Concurrent writers for the same URL are fine: the last one wins.

    Args:
        ttl_seconds: How long an entry stays fresh.
        clock: Monotonic time source in seconds.
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, _Entry] = {}

    def get(self, url: str) -> ExtractedContent | None:
        entry = self._entries.get(url)
        if entry is None:
            return None
        if self._clock() - entry.stored_at >= self._ttl:
            del self._entries[url]
            return None
        return entry.content

    def put(self, content: ExtractedContent, url: str | None = None) -> None:
        """Store ``content`` under ``url`` (default: ``content.url``)."""
        self._entries[url or content.url] = _Entry(content=content, stored_at=self._clock())

    def __len__(self) -> int:
        return len(self._entries)
