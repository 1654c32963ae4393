"""Exceptions raised inside the research pipeline.

Most of these never reach the caller of the engine: each component has its
own recovery path (retry, fallback, dropping a page). They exist so the
failure modes stay distinguishable where they are handled.
"""


class ResearchError(Exception):
    """Base exception for research pipeline errors."""


class ParseFailure(ResearchError):
    """Model output could not be turned into the expected JSON shape."""


class PageFetchFailure(ResearchError):
    """A page could not be fetched or its content was unusable."""


class PageSurfaceCrash(ResearchError):
    """The page-rendering surface crashed or was disposed mid-fetch.

    Unlike ``PageFetchFailure`` this is never absorbed by the low-level
    fetch helper; the retriever decides what to do with the surface.
    """


_CRASH_MARKERS = ("crashed", "target closed", "disposed")


def is_surface_crash(exc: BaseException) -> bool:
    """Whether an exception signals a crashed rendering surface.

    Collaborators should raise ``PageSurfaceCrash`` directly; generic errors
    whose message reports a crashed or closed target are recognised too.
    """
    if isinstance(exc, PageSurfaceCrash):
        return True
    message = str(exc).lower()
    return any(marker in message for marker in _CRASH_MARKERS)
