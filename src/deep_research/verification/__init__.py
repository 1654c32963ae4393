from deep_research.verification.cross_reference import (
    CrossReferencer,
    confidence_tier,
    normalize_fact_key,
)

__all__ = [
    "CrossReferencer",
    "confidence_tier",
    "normalize_fact_key",
]
