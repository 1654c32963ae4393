"""Merge facts that state the same claim across sources."""

import logging
import re
import time
from dataclasses import dataclass

from deep_research.data import (
    ConfidenceLevel,
    ExtractedFact,
    SourceEvaluation,
    SourceReference,
    VerifiedFact,
)
from deep_research.url import extract_domain

logger = logging.getLogger(__name__)

KEY_WORDS = 5
MIN_KEY_WORD_LENGTH = 4
MAX_QUOTE_CHARS = 200
OFFICIAL_AUTHORITY = 90

_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_TIER_ORDER = {ConfidenceLevel.HIGH: 3, ConfidenceLevel.MEDIUM: 2, ConfidenceLevel.LOW: 1}


def normalize_fact_key(claim: str) -> str:
    """Grouping key: the first five significant words of the claim, sorted.

    A claim without significant words keys on its own normalized text so it
    never merges with unrelated claims.
    """
    normalized = _NON_ALNUM_RE.sub("", claim.lower())
    words = sorted(w for w in normalized.split() if len(w) >= MIN_KEY_WORD_LENGTH)
    if not words:
        return "raw:" + " ".join(normalized.split())
    return "_".join(words[:KEY_WORDS])


@dataclass(frozen=True)
class _Sourced:
    fact: ExtractedFact
    evaluation: SourceEvaluation


def _fact_confidence(fact: ExtractedFact) -> int:
    return fact.confidence if fact.confidence is not None else 0


def confidence_tier(
    unique_domains: int, avg_authority: float, has_official: bool, avg_fact_confidence: float
) -> ConfidenceLevel:
    if (
        (unique_domains >= 3 and avg_authority >= 70)
        or (unique_domains >= 2 and avg_authority >= 75)
        or (unique_domains >= 2 and avg_fact_confidence >= 80)
        or (has_official and avg_fact_confidence >= 75)
    ):
        return ConfidenceLevel.HIGH
    if unique_domains >= 2 or has_official or avg_authority >= 70 or avg_fact_confidence >= 60:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


class CrossReferencer:
    """Group facts by a normalized claim key and grade each group.

    Deterministic: the same evaluations always produce the same verified facts
    in the same order.
    """

    def verify(self, evaluations: list[SourceEvaluation]) -> list[VerifiedFact]:
        t0 = time.monotonic()
        groups: dict[str, list[_Sourced]] = {}
        for evaluation in evaluations:
            for fact in evaluation.extracted_facts:
                key = normalize_fact_key(fact.claim)
                groups.setdefault(key, []).append(_Sourced(fact=fact, evaluation=evaluation))

        verified = [self._verify_group(members) for members in groups.values()]
        verified.sort(key=lambda v: _TIER_ORDER[v.confidence], reverse=True)

        logger.info(
            "Verified %d facts from %d sources in %.0fms",
            len(verified),
            len(evaluations),
            (time.monotonic() - t0) * 1000,
        )
        return verified

    def _verify_group(self, members: list[_Sourced]) -> VerifiedFact:
        primary = max(members, key=lambda m: _fact_confidence(m.fact)).fact

        seen_urls: set[str] = set()
        sources: list[SourceReference] = []
        for member in members:
            url = member.fact.source_url or member.evaluation.url
            if url in seen_urls:
                continue
            seen_urls.add(url)
            sources.append(
                SourceReference(
                    url=url,
                    domain=member.evaluation.domain or extract_domain(url),
                    title=member.evaluation.content.title,
                    authority_score=member.evaluation.authority_score,
                    exact_quote=member.fact.context[:MAX_QUOTE_CHARS],
                )
            )
        sources.sort(key=lambda s: s.authority_score, reverse=True)

        unique_domains = len({s.domain for s in sources})
        avg_authority = sum(s.authority_score for s in sources) / len(sources)
        has_official = any(s.authority_score >= OFFICIAL_AUTHORITY for s in sources)
        avg_fact_confidence = sum(_fact_confidence(m.fact) for m in members) / len(members)
        tier = confidence_tier(unique_domains, avg_authority, has_official, avg_fact_confidence)

        logger.debug(
            "Fact %r: %s confidence (sources: %d, avg authority: %.1f, "
            "avg fact confidence: %.1f)",
            primary.claim[:60],
            tier,
            unique_domains,
            avg_authority,
            avg_fact_confidence,
        )

        values = list(dict.fromkeys(m.fact.value for m in members if m.fact.value is not None))
        conflicting = None
        if len(values) > 1:
            conflicting = f"Conflicting values found: {' vs '.join(values)}"

        return VerifiedFact(
            claim=primary.claim,
            value=primary.value,
            sources=tuple(sources),
            confidence=tier,
            agreement_count=unique_domains,
            conflicting_info=conflicting,
        )
