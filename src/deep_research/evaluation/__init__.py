from deep_research.evaluation.base import Evaluator
from deep_research.evaluation.evaluator import SourceEvaluator, parse_facts
from deep_research.evaluation.scoring import (
    DOMAIN_AUTHORITY,
    authority_score,
    overall_score,
    recency_score,
    relevance_score,
)

__all__ = [
    "DOMAIN_AUTHORITY",
    "Evaluator",
    "SourceEvaluator",
    "authority_score",
    "overall_score",
    "parse_facts",
    "recency_score",
    "relevance_score",
]
