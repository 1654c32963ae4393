"""Reject extracted "facts" that are really CSS, JavaScript or markup, and score the rest.

Validation is an ordered table of named rules (``FACT_RULES``); the first
rule that fires rejects the fact and names the reason.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, replace

from deep_research.data import ExtractedFact

logger = logging.getLogger(__name__)

# Signatures of stylesheet, script and DOM text, matched against claim + context.
INVALID_FACT_PATTERNS: tuple[re.Pattern[str], ...] = (
    # CSS properties
    re.compile(r"font-family", re.IGNORECASE),
    re.compile(r"font-size", re.IGNORECASE),
    re.compile(r"font-weight", re.IGNORECASE),
    re.compile(r"background-color", re.IGNORECASE),
    re.compile(r"background-image", re.IGNORECASE),
    re.compile(r"border-radius", re.IGNORECASE),
    re.compile(r"border-width", re.IGNORECASE),
    re.compile(r"padding|margin", re.IGNORECASE),
    re.compile(r"width\s*:\s*\d+px", re.IGNORECASE),
    re.compile(r"height\s*:\s*\d+px", re.IGNORECASE),
    re.compile(r"display\s*:\s*(?:flex|block|none|inline)", re.IGNORECASE),
    re.compile(r"position\s*:\s*(?:absolute|relative|fixed)", re.IGNORECASE),
    re.compile(r"z-index", re.IGNORECASE),
    re.compile(r"opacity", re.IGNORECASE),
    re.compile(r"transform", re.IGNORECASE),
    re.compile(r"transition", re.IGNORECASE),
    re.compile(r"animation", re.IGNORECASE),
    re.compile(r"color\s*:\s*#[0-9a-f]", re.IGNORECASE),
    re.compile(r"rgba?\s*\(", re.IGNORECASE),
    # CSS selectors and at-rules
    re.compile(r"^\."),
    re.compile(r"^#[\w-]+\s*\{"),
    re.compile(r"\.[\w-]+\s*\{"),
    re.compile(r"::before|::after", re.IGNORECASE),
    re.compile(r":hover|:focus|:active", re.IGNORECASE),
    re.compile(r"@media\s*\(", re.IGNORECASE),
    re.compile(r"@font-face", re.IGNORECASE),
    re.compile(r"@keyframes", re.IGNORECASE),
    re.compile(r"@import", re.IGNORECASE),
    # JavaScript
    re.compile(r"addEventListener", re.IGNORECASE),
    re.compile(r"querySelector", re.IGNORECASE),
    re.compile(r"getElementById", re.IGNORECASE),
    re.compile(r"getElementsBy", re.IGNORECASE),
    re.compile(r"classList\.", re.IGNORECASE),
    re.compile(r"\.innerHTML", re.IGNORECASE),
    re.compile(r"\.innerText", re.IGNORECASE),
    re.compile(r"\.textContent", re.IGNORECASE),
    re.compile(r"document\.", re.IGNORECASE),
    re.compile(r"window\.", re.IGNORECASE),
    re.compile(r"console\.", re.IGNORECASE),
    re.compile(r"Object\.freeze", re.IGNORECASE),
    re.compile(r"Object\.assign", re.IGNORECASE),
    re.compile(r"JSON\.(?:parse|stringify)", re.IGNORECASE),
    re.compile(r"localStorage", re.IGNORECASE),
    re.compile(r"sessionStorage", re.IGNORECASE),
    re.compile(r"fetch\s*\(", re.IGNORECASE),
    re.compile(r"async\s+function", re.IGNORECASE),
    re.compile(r"=>\s*\{"),
    re.compile(r"function\s*\([^)]*\)\s*\{"),
    re.compile(r"const\s+\w+\s*=\s*\{"),
    re.compile(r"let\s+\w+\s*=\s*\{"),
    re.compile(r"var\s+\w+\s*=\s*\{"),
    re.compile(r"export\s+(?:default\s+)?"),
    re.compile(r"import\s+.*from"),
    re.compile(r"require\s*\("),
    re.compile(r"module\.exports"),
    # theme switcher junk
    re.compile(r"gfgTheme", re.IGNORECASE),
    re.compile(r"darkMode|lightMode|dark-mode|light-mode", re.IGNORECASE),
    re.compile(r"themeList", re.IGNORECASE),
    # markup
    re.compile(r"</?[\w-]+"),
    re.compile(r"&[a-z]+;", re.IGNORECASE),
    re.compile(r"data-[\w-]+=", re.IGNORECASE),
    # styling units
    re.compile(r"\d+px\s*[,};]"),
    re.compile(r"\d+rem\s*[,};]"),
    re.compile(r"\d+em\s*[,};]"),
    re.compile(r"\d+%\s*[,};]"),
    re.compile(r"\d+vh\s*[,};]"),
    re.compile(r"\d+vw\s*[,};]"),
)

# Categories the model tends to use for stylesheet and config dumps.
SUSPICIOUS_CATEGORIES: frozenset[str] = frozenset(
    {"specification", "styling", "configuration", "config"}
)

MIN_CLAIM_LENGTH = 15
MAX_CLAIM_LENGTH = 500
MAX_SPECIAL_RATIO = 0.15

_CODE_CHARS_RE = re.compile(r"[{}\[\]();=<>]")
_SPECIAL_CHARS_RE = re.compile(r"[{}\[\]();:=<>/\\|&^%$#@!~`]")
_CODE_START_RE = re.compile(r"^\s*\w+\s*[({=]")
_FUNCTION_WORDS_RE = re.compile(
    r"\b(?:the|is|are|was|were|has|have|can|will|should|a|an|for|to|of|in|on|with|by|from|at)\b",
    re.IGNORECASE,
)

VAGUE_CATEGORIES: frozenset[str] = frozenset({"claim", "other"})
CONCRETE_CATEGORIES: frozenset[str] = frozenset(
    {"pricing", "feature", "statistic", "date", "fact"}
)


def _matches_code_signature(fact: ExtractedFact) -> bool:
    combined = f"{fact.claim} {fact.context or ''}".lower()
    return any(pattern.search(combined) for pattern in INVALID_FACT_PATTERNS)


def _suspicious_category_with_code(fact: ExtractedFact) -> bool:
    category = (fact.category or "").lower()
    return category in SUSPICIOUS_CATEGORIES and bool(_CODE_CHARS_RE.search(fact.claim))


def _bad_length(fact: ExtractedFact) -> bool:
    return not MIN_CLAIM_LENGTH <= len(fact.claim) <= MAX_CLAIM_LENGTH


def _too_many_special_chars(fact: ExtractedFact) -> bool:
    if not fact.claim:
        return False
    return len(_SPECIAL_CHARS_RE.findall(fact.claim)) / len(fact.claim) > MAX_SPECIAL_RATIO


def _starts_like_code(fact: ExtractedFact) -> bool:
    return bool(_CODE_START_RE.match(fact.claim))


def _not_natural_language(fact: ExtractedFact) -> bool:
    return " " not in fact.claim or not _FUNCTION_WORDS_RE.search(fact.claim)


@dataclass(frozen=True)
class FactRule:
    """A named rejection rule; ``rejects`` returns True for bad facts."""

    name: str
    rejects: Callable[[ExtractedFact], bool]


FACT_RULES: tuple[FactRule, ...] = (
    FactRule("code signature", _matches_code_signature),
    FactRule("suspicious category with code characters", _suspicious_category_with_code),
    FactRule("claim length out of range", _bad_length),
    FactRule("too many special characters", _too_many_special_chars),
    FactRule("code-like structure", _starts_like_code),
    FactRule("not natural language", _not_natural_language),
)


def rejection_reason(fact: ExtractedFact) -> str | None:
    """Name of the first rule rejecting ``fact``, or None if it is valid."""
    for rule in FACT_RULES:
        if rule.rejects(fact):
            return rule.name
    return None


def is_valid_fact(fact: ExtractedFact) -> bool:
    reason = rejection_reason(fact)
    if reason is not None:
        logger.debug("Rejected fact (%s): %r", reason, fact.claim[:60])
        return False
    return True


def filter_valid_facts(facts: list[ExtractedFact]) -> list[ExtractedFact]:
    """Keep only facts that pass every rule."""
    valid = [fact for fact in facts if is_valid_fact(fact)]
    if len(valid) < len(facts):
        logger.info("Filtered %d/%d invalid facts", len(facts) - len(valid), len(facts))
    return valid


def score_fact(fact: ExtractedFact) -> int:
    """Quality score (0-100) for a fact that already passed validation.

    A missing confidence counts as 60, and a given confidence under 40 is
    lifted to 55: surviving validation already makes the claim plausible.
    """
    if not fact.confidence:
        score = 60
    elif fact.confidence < 40:
        score = 55
    else:
        score = fact.confidence

    if len(fact.claim) > 50:
        score += 5
    if len(fact.claim) > 100:
        score += 5
    if fact.context and len(fact.context) > 50:
        score += 10
    if fact.value:
        score += 10
    if fact.category in VAGUE_CATEGORIES:
        score -= 5
    if fact.category in CONCRETE_CATEGORIES:
        score += 5

    return max(0, min(100, score))


def validate_and_score(facts: list[ExtractedFact]) -> list[ExtractedFact]:
    """Filter ``facts`` and replace each survivor's confidence with its score."""
    return [replace(fact, confidence=score_fact(fact)) for fact in filter_valid_facts(facts)]
