from deep_research.gaps.analyzer import GapAnalyzer, parse_gaps
from deep_research.gaps.base import GapFinder

__all__ = [
    "GapAnalyzer",
    "GapFinder",
    "parse_gaps",
]
