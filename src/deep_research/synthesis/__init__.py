from deep_research.synthesis.synthesizer import (
    Synthesizer,
    collect_sources,
    format_facts,
    overall_confidence,
    relevant_gaps,
)

__all__ = [
    "Synthesizer",
    "collect_sources",
    "format_facts",
    "overall_confidence",
    "relevant_gaps",
]
