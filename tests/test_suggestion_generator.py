"""
Tests for suggestion generation and cleaning.
"""

import json

import pytest

from agents.suggestion_generator import (
    MULTI_CALL_SUGGESTION_LIMIT,
    SINGLE_CALL_SUGGESTION_LIMIT,
    clean_suggestions,
    generate_suggestions,
    parse_suggestions
)
from models.errors import MalformedSuggestions
from models.schemas import FinalAnalysis

from tests.conftest import ScriptedClient


def test_clean_suggestions_trims_and_caps():
    items = ["  Publish a comparison page.  ", "", "   ", None, 3] + [f"Idea {i}" for i in range(20)]

    cleaned = clean_suggestions(items, SINGLE_CALL_SUGGESTION_LIMIT)

    assert cleaned[0] == "Publish a comparison page."
    assert len(cleaned) == SINGLE_CALL_SUGGESTION_LIMIT
    assert all(item.strip() == item and item for item in cleaned)


def test_parse_caps_to_multi_call_limit():
    raw = json.dumps({"suggestions": [f"Suggestion {i}" for i in range(14)]})
    assert len(parse_suggestions(raw, MULTI_CALL_SUGGESTION_LIMIT)) == 10


def test_missing_key_means_no_suggestions():
    assert parse_suggestions('{"ideas": ["x"]}', 10) == []


@pytest.mark.parametrize("raw", [
    "Write more blog posts.",
    '["a", "b"]',
    '{"suggestions": "Write more blog posts."}',
])
def test_malformed_suggestions(raw):
    with pytest.raises(MalformedSuggestions):
        parse_suggestions(raw, 10)


def test_generate_suggestions_serializes_analysis(site):
    client = ScriptedClient(['{"suggestions": ["Add a Zentrix vs Jira page."]}'])
    analysis = FinalAnalysis().model_dump(mode="json")
    analysis["direct"]["queries"] = [{"query": "zentrix review", "brands": [{"name": "Jira", "url": "", "citations": []}]}]

    suggestions = generate_suggestions(client, site, analysis, "gpt-4.1-mini")

    assert suggestions == ["Add a Zentrix vs Jira page."]
    prompt = client.calls[0]["prompt"]
    assert '"zentrix review"' in prompt
    assert site.name in prompt
    assert "Maximum 10 suggestions" in prompt
