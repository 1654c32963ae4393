from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class PageContent:
    """Visible text and raw markup of the current page."""

    text: str
    html: str


@dataclass(frozen=True)
class PageInfo:
    """Title and final URL of a loaded page."""

    title: str
    url: str


@dataclass(frozen=True)
class TabHandle:
    """Opaque reference to a background tab owned by a ``TabPool``."""

    id: str
    session_id: str


class PageBrowser(Protocol):
    """A single page surface the pipeline can drive.

    Implementations raise ``PageSurfaceCrash`` when the rendering surface
    itself dies.
    """

    async def navigate(self, url: str) -> None: ...

    async def extract_content(self) -> PageContent: ...

    async def get_page_info(self) -> PageInfo: ...

    async def run_script(self, script: str) -> Any:
        """Evaluate a script in the page and return its JSON-able result.

        Surfaces without a script engine return None.
        """
        ...


class TabPool(Protocol):
    """Optional capability for fetching pages in isolated background tabs."""

    async def create_background_tab(self, session_id: str, url: str) -> TabHandle: ...

    async def get_tab_state(self, tab: TabHandle) -> PageInfo | None: ...

    async def close_tab(self, tab: TabHandle) -> None: ...

    async def run_script(self, tab: TabHandle, script: str) -> Any: ...
