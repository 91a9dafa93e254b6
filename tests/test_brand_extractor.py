"""
Tests for research collection and brand extraction.
"""

import json

import pytest

from agents.brand_extractor import extract_brands, parse_brands
from agents.research_collector import collect_research
from models.errors import MalformedBrands
from models.schemas import ResearchNote
from utils.llm_client import WEB_SEARCH

from tests.conftest import ScriptedClient

MODEL = "gpt-4.1-mini"


def test_collect_research_uses_web_search(site):
    client = ScriptedClient(["- Jira (jira.com) found on g2.com\n- Linear (linear.app)"])

    note = collect_research(client, site, "best sprint planning tool", MODEL)

    assert note.query == "best sprint planning tool"
    assert note.text.startswith("- Jira")
    call = client.calls[0]
    assert call["tools"] == [WEB_SEARCH]
    assert call["tool_choice"] == "auto"
    assert '"best sprint planning tool"' in call["prompt"]
    assert "do NOT output JSON" in call["prompt"]


def test_null_citations_become_empty_lists():
    brands = parse_brands(json.dumps({
        "brands": [
            {"name": "Jira", "url": "https://jira.com", "citations": None},
            {"name": "Linear", "url": None},
        ]
    }))

    assert [b.citations for b in brands] == [[], []]
    assert brands[1].url == ""


def test_nameless_brands_dropped():
    brands = parse_brands('{"brands": [{"name": "  "}, {"url": "x.com"}, {"name": "Asana", "citations": ["g2.com", ""]}]}')

    assert [b.name for b in brands] == ["Asana"]
    assert brands[0].citations == ["g2.com"]


def test_empty_brand_list():
    assert parse_brands('```json\n{"brands": []}\n```') == []
    assert parse_brands('{"brands": null}') == []


@pytest.mark.parametrize("raw", [
    "I could not find any brands.",
    '["Jira", "Linear"]',
    '{"brands": "Jira"}',
])
def test_malformed_brands(raw):
    with pytest.raises(MalformedBrands) as exc_info:
        parse_brands(raw)
    assert exc_info.value.raw_text == raw


def test_extract_brands_sends_notes(site):
    client = ScriptedClient(['{"brands": [{"name": "Jira", "url": "https://jira.com", "citations": ["g2.com"]}]}'])
    note = ResearchNote(query="best sprint planning tool", text="Jira is popular (g2.com)")

    brands = extract_brands(client, note, MODEL)

    assert brands[0].name == "Jira"
    assert "Jira is popular (g2.com)" in client.calls[0]["prompt"]
    assert client.calls[0]["tools"] is None
