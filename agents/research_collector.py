"""
Research Collector

Runs one web-search-enabled call per query and keeps the findings as free
text. Structure is imposed later by the brand extractor.
"""

import logging
from typing import Optional

from models.schemas import ResearchNote, SiteProfile
from utils.deadline import Deadline
from utils.llm_client import WEB_SEARCH, GenerativeClient

logger = logging.getLogger(__name__)


def build_research_prompt(query: str, site: SiteProfile) -> str:
    return f"""You are a research assistant.

Use the web_search tool to research the query:

"{query}"

Focus on brands and services that appear relevant to this query.
Return a concise summary (in English or in {site.language}) that lists:
- brand names
- their URLs if possible
- where you found them (domains / pages)

You may structure your answer as bullet points, but do NOT output JSON in this step.
"""


def collect_research(
    client: GenerativeClient,
    site: SiteProfile,
    query: str,
    model: str,
    deadline: Optional[Deadline] = None
) -> ResearchNote:
    """Research one query with the hosted web-search tool."""
    logger.info(f"🔎 Researching query: {query!r}")

    text = client.generate(
        model,
        build_research_prompt(query, site),
        tools=[WEB_SEARCH],
        tool_choice="auto",
        deadline=deadline
    )

    logger.info(f"✓ Research notes for {query!r}: {len(text)} chars")
    return ResearchNote(query=query, text=text)
