"""
Suggestion Generator

One call over the complete analysis producing short, concrete
recommendations for the target site.
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Optional

from models.errors import MalformedSuggestions
from models.schemas import SiteProfile
from utils.deadline import Deadline
from utils.json_extractor import decode_json
from utils.llm_client import GenerativeClient

logger = logging.getLogger(__name__)

MULTI_CALL_SUGGESTION_LIMIT = 10
SINGLE_CALL_SUGGESTION_LIMIT = 8


def clean_suggestions(items: Iterable[Any], limit: int) -> List[str]:
    """Trim entries, drop blanks and non-strings, cap to ``limit``."""
    cleaned = []
    for item in items:
        if not isinstance(item, str):
            continue
        text = item.strip()
        if text:
            cleaned.append(text)
        if len(cleaned) >= limit:
            break
    return cleaned


def build_suggestion_prompt(site: SiteProfile, analysis: Dict[str, Any], limit: int) -> str:
    return f"""You are an SEO strategist.

You will receive:
1) Target site:
   - name: {site.name}
   - url: {site.url}
   - description: {site.description}
   - language/region: {site.language}

2) A JSON object called FinalBrandAnalysis with:
   - direct queries (brand-aware)
   - intermediate queries (product / task / use-case)
   - indirect queries (broader upstream intent)
Each query contains multiple competing brands, their URLs, and the pages/domains where they were cited.

Your tasks:
- Compare the target site against all the competitors that appear in the analysis.
- Pay attention to where competitors are cited (domains/pages) and how often they appear across queries and query types.
- Note what they seem to be doing that the target is not (content, landing pages, tools, comparison pages).
- Think in terms of realistic SEO / content / product suggestions that the target site could implement.

OUTPUT FORMAT (STRICT):
{{
  "suggestions": [
    "One short, concrete suggestion...",
    "Another short, concrete suggestion..."
  ]
}}

Rules:
- Maximum {limit} suggestions.
- Each suggestion: 1-2 sentences, absolutely practical and specific to THIS target site.
- Do NOT mention JSON structure or internal details.
- Output ONLY valid JSON in the exact schema above. No markdown, no explanations.

FinalBrandAnalysis JSON:
------------------------
{json.dumps(analysis, ensure_ascii=False)}
"""


def parse_suggestions(raw_text: str, limit: int) -> List[str]:
    """
    Raises:
        MalformedSuggestions: Not decodable, or ``suggestions`` is not a list
    """
    try:
        payload = decode_json(raw_text)
    except ValueError as e:
        logger.error(f"❌ Failed to parse suggestions JSON: {e}")
        raise MalformedSuggestions(f"failed to parse suggestions JSON: {e}", raw_text) from e

    if not isinstance(payload, dict):
        raise MalformedSuggestions("suggestions JSON is not an object", raw_text)

    items = payload.get("suggestions")
    if items is None:
        return []
    if not isinstance(items, list):
        raise MalformedSuggestions("suggestions is not an array", raw_text)

    return clean_suggestions(items, limit)


def generate_suggestions(
    client: GenerativeClient,
    site: SiteProfile,
    analysis: Dict[str, Any],
    model: str,
    deadline: Optional[Deadline] = None,
    limit: int = MULTI_CALL_SUGGESTION_LIMIT
) -> List[str]:
    """
    Ask for recommendations based on the serialized analysis.

    Args:
        client: Generative call adapter
        site: Target site
        analysis: JSON-ready analysis payload
        model: Model identifier
        deadline: Optional run deadline
        limit: Maximum number of suggestions kept

    Returns:
        Cleaned suggestions, at most ``limit`` long
    """
    logger.info(f"💡 Generating up to {limit} suggestions for {site.url}")

    raw_text = client.generate(
        model, build_suggestion_prompt(site, analysis, limit), deadline=deadline
    )
    suggestions = parse_suggestions(raw_text, limit)

    logger.info(f"✓ Generated {len(suggestions)} suggestions")
    return suggestions
