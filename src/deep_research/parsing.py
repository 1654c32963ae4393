"""Robust JSON extraction from free-text model output.

Models wrap JSON in markdown fences, surround it with prose, or get cut off
by the token limit halfway through an array. ``parse_json_robust`` tries a
sequence of increasingly forgiving strategies; ``extract_and_parse_json``
adds shape validation and, for the two most valuable shapes (facts and
gaps), salvages whatever complete objects a truncated response contains.
"""

import json
import logging
import re
from typing import Any

from deep_research.errors import ParseFailure

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)
_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")

_STRING = r'"((?:[^"\\]|\\.)*)"'

_PARTIAL_FACT_RE = re.compile(
    r'\{\s*"claim"\s*:\s*' + _STRING + r"\s*,?\s*"
    r'(?:"value"\s*:\s*' + _STRING + r"\s*,?)?\s*"
    r'(?:"context"\s*:\s*' + _STRING + r"\s*,?)?\s*"
    r'(?:"confidence"\s*:\s*(\d+)\s*,?)?\s*'
    r'(?:"category"\s*:\s*"([^"]*)"\s*)?\}'
)

_PARTIAL_GAP_RE = re.compile(
    r'\{\s*"subQuestionId"\s*:\s*"([^"]*)"\s*,?\s*'
    r'(?:"description"\s*:\s*' + _STRING + r"\s*,?)?\s*"
    r'(?:"suggestedQuery"\s*:\s*' + _STRING + r"\s*,?)?\s*"
    r'(?:"importance"\s*:\s*"([^"]*)"\s*)?\}'
)


def _try_loads(text: str) -> tuple[bool, Any]:
    try:
        return True, json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return False, None


def _strip_fences(text: str) -> str:
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    return text


def _balanced_block(text: str) -> str | None:
    """Return the first complete ``{...}`` or ``[...]`` block in ``text``."""
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        return None
    start = min(starts)

    stack: list[str] = []
    in_string = False
    escape_next = False
    for i in range(start, len(text)):
        char = text[i]
        if escape_next:
            escape_next = False
            continue
        if char == "\\" and in_string:
            escape_next = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if char in "{[":
            stack.append("}" if char == "{" else "]")
        elif char in "}]":
            if stack and stack[-1] == char:
                stack.pop()
            if not stack:
                return text[start : i + 1]
    return None


def repair_json(text: str) -> str | None:
    """Close whatever a truncated JSON document left open.

    Cuts everything before the first opener, terminates an unfinished
    string, drops a dangling comma, appends the missing closers in nesting
    order and removes commas that end up in front of a closer.

    Returns:
        The repaired text, or None when there is no JSON opener at all.
    """
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        return None
    body = text[min(starts) :]

    stack: list[str] = []
    in_string = False
    escape_next = False
    for i, char in enumerate(body):
        if escape_next:
            escape_next = False
            continue
        if char == "\\" and in_string:
            escape_next = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if char in "{[":
            stack.append("}" if char == "{" else "]")
        elif char in "}]":
            if stack and stack[-1] == char:
                stack.pop()
            if not stack:
                body = body[: i + 1]
                break

    repaired = body.rstrip()
    if in_string:
        repaired += '"'
    repaired = re.sub(r",\s*$", "", repaired)
    repaired += "".join(reversed(stack))
    return _TRAILING_COMMA_RE.sub(r"\1", repaired)


def parse_json_robust(text: str, context: str | None = None) -> Any:
    """Parse JSON out of model output, repairing it when necessary.

    Args:
        text: Raw model output.
        context: Short description of the caller, used in error messages.

    Returns:
        The decoded JSON value.

    Raises:
        ParseFailure: If the text is empty or every strategy fails.
    """
    where = f" for {context}" if context else ""
    if not text or not text.strip():
        raise ParseFailure(f"Empty JSON string{where}")

    stripped = text.strip()
    ok, value = _try_loads(stripped)
    if ok:
        return value

    extracted = _strip_fences(stripped)
    if extracted is not stripped:
        ok, value = _try_loads(extracted)
        if ok:
            return value

    block = _balanced_block(extracted)
    if block is not None:
        ok, value = _try_loads(_TRAILING_COMMA_RE.sub(r"\1", block))
        if ok:
            return value

    repaired = repair_json(extracted)
    if repaired is not None:
        ok, value = _try_loads(repaired)
        if ok:
            return value
        logger.debug("Repaired JSON%s still invalid: %s", where, repaired[:500])

    # Last resort: from the first line opening a structure to the first
    # line closing one.
    lines = extracted.split("\n")
    first = last = -1
    for i, line in enumerate(lines):
        line = line.strip()
        if first == -1 and line.startswith(("{", "[")):
            first = i
        if first != -1 and line.endswith(("}", "]")):
            last = i + 1
            break
    if first != -1 and last != -1:
        ok, value = _try_loads("\n".join(lines[first:last]))
        if ok:
            return value

    raise ParseFailure(f"Failed to parse JSON{where}. Original string: {text[:200]}...")


def validate_json_structure(
    parsed: Any,
    *,
    required_fields: tuple[str, ...] = (),
    array_field: str | None = None,
    object_field: str | None = None,
) -> bool:
    """Check a decoded value against the expected top-level shape."""
    if not isinstance(parsed, dict):
        return False
    if any(f not in parsed for f in required_fields):
        return False
    if array_field is not None and not isinstance(parsed.get(array_field), list):
        return False
    if object_field is not None and not isinstance(parsed.get(object_field), dict):
        return False
    return True


def _unescape(raw: str) -> str:
    ok, value = _try_loads(f'"{raw}"')
    if ok and isinstance(value, str):
        return value
    return raw.replace('\\"', '"').replace("\\n", "\n").replace("\\\\", "\\")


def extract_partial_facts(text: str) -> list[dict[str, Any]]:
    """Salvage complete fact objects from a truncated facts response."""
    facts: list[dict[str, Any]] = []
    for match in _PARTIAL_FACT_RE.finditer(text):
        claim = _unescape(match.group(1))
        if not claim.strip():
            continue
        fact: dict[str, Any] = {
            "claim": claim,
            "value": _unescape(match.group(2) or ""),
            "context": _unescape(match.group(3) or ""),
            "category": match.group(5) or "claim",
        }
        if match.group(4):
            fact["confidence"] = int(match.group(4))
        facts.append(fact)
    return facts


def extract_partial_gaps(text: str) -> list[dict[str, Any]]:
    """Salvage complete gap objects from a truncated gaps response."""
    gaps: list[dict[str, Any]] = []
    for match in _PARTIAL_GAP_RE.finditer(text):
        description = _unescape(match.group(2) or "")
        suggested = _unescape(match.group(3) or "")
        if not description.strip() and not suggested.strip():
            continue
        gaps.append(
            {
                "subQuestionId": match.group(1) or "new",
                "description": description,
                "suggestedQuery": suggested,
                "importance": match.group(4) or "important",
            }
        )
    return gaps


def extract_and_parse_json(
    text: str,
    *,
    required_fields: tuple[str, ...] = (),
    array_field: str | None = None,
    object_field: str | None = None,
    context: str | None = None,
) -> dict[str, Any]:
    """Parse model output and check it has the expected shape.

    When the output is unusable and the expected array is ``facts`` or
    ``gaps``, individually complete objects are extracted with a regex
    instead, so a response truncated mid-array still yields data.

    Raises:
        ParseFailure: If neither full parsing nor partial extraction works.
    """
    where = f" for {context}" if context else ""
    try:
        parsed = parse_json_robust(text, context)
        if not validate_json_structure(
            parsed,
            required_fields=required_fields,
            array_field=array_field,
            object_field=object_field,
        ):
            raise ParseFailure(
                f"Invalid JSON structure{where}: expected fields {list(required_fields)}"
            )
        return parsed
    except ParseFailure:
        if array_field == "facts":
            facts = extract_partial_facts(text or "")
            if facts:
                logger.info("Extracted %d partial facts from incomplete JSON%s", len(facts), where)
                return {"facts": facts}
        if array_field == "gaps":
            gaps = extract_partial_gaps(text or "")
            if gaps:
                logger.info("Extracted %d partial gaps from incomplete JSON%s", len(gaps), where)
                return {"gaps": gaps, "conflicts": []}
        raise
