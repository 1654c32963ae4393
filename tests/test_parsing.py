"""Tests for robust JSON parsing of model output."""

import pytest

from deep_research.errors import ParseFailure
from deep_research.parsing import (
    extract_and_parse_json,
    extract_partial_facts,
    extract_partial_gaps,
    parse_json_robust,
    repair_json,
    validate_json_structure,
)


class TestParseJsonRobust:
    def test_plain_json(self) -> None:
        assert parse_json_robust('{"a": 1}') == {"a": 1}

    def test_markdown_fence(self) -> None:
        text = 'Here you go:\n```json\n{"facts": []}\n```\nThanks'
        assert parse_json_robust(text) == {"facts": []}

    def test_surrounding_prose(self) -> None:
        text = 'Sure! {"gaps": [{"description": "x"}]} Hope that helps.'
        assert parse_json_robust(text) == {"gaps": [{"description": "x"}]}

    def test_trailing_comma(self) -> None:
        assert parse_json_robust('{"items": [1, 2, 3,],}') == {"items": [1, 2, 3]}

    def test_truncated_object_is_repaired(self) -> None:
        text = '{"facts": [{"claim": "One", "value": "1"}, {"claim": "Tw'
        parsed = parse_json_robust(text)
        assert parsed["facts"][0] == {"claim": "One", "value": "1"}
        assert parsed["facts"][1] == {"claim": "Tw"}

    def test_braces_inside_strings(self) -> None:
        text = 'prefix {"claim": "uses {braces} and [brackets]"} suffix'
        assert parse_json_robust(text) == {"claim": "uses {braces} and [brackets]"}

    def test_empty_raises(self) -> None:
        with pytest.raises(ParseFailure, match="Empty JSON string for tests"):
            parse_json_robust("   ", "tests")

    def test_no_json_raises(self) -> None:
        with pytest.raises(ParseFailure):
            parse_json_robust("I could not find any facts.")


def test_repair_json_closes_open_structures() -> None:
    assert repair_json('{"a": [1, 2,') == '{"a": [1, 2]}'
    assert repair_json("no json here") is None


def test_validate_json_structure() -> None:
    assert validate_json_structure({"facts": []}, required_fields=("facts",), array_field="facts")
    assert not validate_json_structure([], required_fields=("facts",))
    assert not validate_json_structure({"facts": {}}, array_field="facts")
    assert not validate_json_structure({"data": []}, object_field="data")


def test_extract_partial_facts() -> None:
    text = (
        '{"facts":[{"claim":"Plan A costs \\"$10\\"","value":"$10","context":"ctx",'
        '"confidence":80,"category":"pricing"},{"claim":"Half a fa'
    )
    facts = extract_partial_facts(text)
    assert len(facts) == 1
    assert facts[0]["claim"] == 'Plan A costs "$10"'
    assert facts[0]["confidence"] == 80
    assert facts[0]["category"] == "pricing"


def test_extract_partial_gaps() -> None:
    text = (
        '{"gaps":[{"subQuestionId":"q1","description":"No prices",'
        '"suggestedQuery":"plan prices","importance":"critical"},{"subQuestionId":"q2","desc'
    )
    gaps = extract_partial_gaps(text)
    assert gaps == [
        {
            "subQuestionId": "q1",
            "description": "No prices",
            "suggestedQuery": "plan prices",
            "importance": "critical",
        }
    ]


class TestExtractAndParseJson:
    def test_valid_structure(self) -> None:
        parsed = extract_and_parse_json(
            '{"subQuestions": [{"id": "q1"}]}',
            required_fields=("subQuestions",),
            array_field="subQuestions",
        )
        assert parsed["subQuestions"][0]["id"] == "q1"

    def test_wrong_structure_raises(self) -> None:
        with pytest.raises(ParseFailure, match="Invalid JSON structure"):
            extract_and_parse_json('{"other": 1}', required_fields=("subQuestions",))

    def test_truncated_facts_yield_partial_list(self) -> None:
        # A dangling escape at the cut defeats every repair strategy.
        text = (
            'Facts: {"facts": [{"claim": "The Pro plan costs $20 per month", '
            '"value": "$20", "context": "Pricing page", "confidence": 90, '
            '"category": "pricing"}, {"claim": "Broken \\'
        )
        parsed = extract_and_parse_json(
            text, required_fields=("facts",), array_field="facts", context="facts"
        )
        assert parsed["facts"]
        assert parsed["facts"][0]["claim"] == "The Pro plan costs $20 per month"

    def test_partial_gaps_fall_back(self) -> None:
        text = (
            'gaps: [{"subQuestionId": "q1", "description": "Missing limits", '
            '"suggestedQuery": "api rate limits", "importance": "critical"}'
        )
        parsed = extract_and_parse_json(text, required_fields=("gaps",), array_field="gaps")
        assert parsed["gaps"][0]["description"] == "Missing limits"
        assert parsed["conflicts"] == []
