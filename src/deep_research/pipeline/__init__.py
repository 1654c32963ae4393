"""Pipeline module for end-to-end research."""

from deep_research.pipeline.base import ResearchPipeline
from deep_research.pipeline.engine import DeepResearchEngine

__all__ = [
    "DeepResearchEngine",
    "ResearchPipeline",
]
