from deep_research.search.base import SearchBackend, Searcher
from deep_research.search.browser import BrowserSearchBackend, is_video_url, parse_result_links
from deep_research.search.parallel import ParallelSearcher, flatten_results

__all__ = [
    "BrowserSearchBackend",
    "ParallelSearcher",
    "SearchBackend",
    "Searcher",
    "flatten_results",
    "is_video_url",
    "parse_result_links",
]
