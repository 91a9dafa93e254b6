"""
Query Generator

Generates search queries for one intent category of a site. Direct queries
name the brand; intermediate and indirect queries must not, so they measure
how visible the site is to searchers who do not know it yet.
"""

import logging
from typing import Dict, List, Optional

from models.errors import MalformedQueries
from models.schemas import (
    CATEGORY_ORDER,
    CategoryCounts,
    GeneratedQuery,
    IntentCategory,
    SiteProfile
)
from utils.deadline import Deadline
from utils.helpers import brand_tokens, contains_brand_token, deduplicate_queries
from utils.json_extractor import decode_json
from utils.llm_client import GenerativeClient

logger = logging.getLogger(__name__)

# Constants for query generation
MIN_QUERY_WORDS = 3
MAX_QUERY_WORDS = 12

CATEGORY_RULES = {
    IntentCategory.DIRECT: "must contain the brand or domain or a clear brand token",
    IntentCategory.INTERMEDIATE: "task/topic queries related to the product, NO brand tokens",
    IntentCategory.INDIRECT: "broader, upstream intent queries, NO brand tokens",
}


def build_site_context(site: SiteProfile) -> str:
    return (
        "Site:\n"
        f"- Name: {site.name}\n"
        f"- URL: {site.url}\n"
        f"- Description: {site.description}\n"
        f"- Language: {site.language}\n"
    )


def build_query_prompt(site: SiteProfile, category: IntentCategory, count: int) -> str:
    rules = "\n".join(
        f'- For "{cat.value}": {rule}.' for cat, rule in CATEGORY_RULES.items()
    )
    return f"""You are an SEO query generator.

Given the following site, generate EXACTLY {count} distinct {category.value} queries
in the site's language ({site.language}).

Rules:
- Return ONLY a JSON array of strings, e.g. ["query 1", "query 2", ...].
- No extra text, explanations, or comments.
- Queries must be {MIN_QUERY_WORDS}-{MAX_QUERY_WORDS} words.
- Do not include duplicate queries.
{rules}

{build_site_context(site)}"""


def satisfies_brand_constraint(text: str, category: IntentCategory, tokens: List[str]) -> bool:
    """Direct queries need a brand token; the other categories must avoid them."""
    has_token = contains_brand_token(text, tokens)
    if category == IntentCategory.DIRECT:
        return has_token
    return not has_token


def parse_queries(raw_text: str) -> List[str]:
    """
    Decode the model's query list.

    Accepts a JSON array of strings, or an object holding one under
    ``queries``.

    Raises:
        MalformedQueries: The text holds no decodable query list
    """
    try:
        payload = decode_json(raw_text)
    except ValueError as e:
        logger.error(f"❌ Failed to parse queries JSON: {e}")
        raise MalformedQueries(f"failed to parse queries JSON: {e}", raw_text) from e

    if isinstance(payload, dict) and isinstance(payload.get("queries"), list):
        payload = payload["queries"]

    if not isinstance(payload, list):
        raise MalformedQueries("queries JSON is not an array", raw_text)

    return [item for item in payload if isinstance(item, str)]


def generate_queries_for_category(
    client: GenerativeClient,
    site: SiteProfile,
    category: IntentCategory,
    count: int,
    model: str,
    deadline: Optional[Deadline] = None
) -> List[GeneratedQuery]:
    """
    Generate up to ``count`` queries for one intent category.

    Over-production is truncated to the first ``count`` items that pass the
    category's brand-token rule. Under-production is returned as-is.

    Args:
        client: Generative call adapter
        site: Site being analyzed
        category: Intent category to generate for
        count: Number of queries wanted; ``<= 0`` returns [] without a call
        model: Model identifier
        deadline: Optional run deadline

    Returns:
        List of GeneratedQuery, at most ``count`` long
    """
    category = IntentCategory(category)
    if count <= 0:
        logger.info(f"Skipping {category.value} queries: count={count}")
        return []

    logger.info(f"🎯 Generating {count} {category.value} queries for {site.url}")

    raw_text = client.generate(model, build_query_prompt(site, category, count), deadline=deadline)
    candidates = deduplicate_queries(parse_queries(raw_text), ignore_case=True)

    tokens = brand_tokens(site)
    accepted = [text for text in candidates if satisfies_brand_constraint(text, category, tokens)]
    if len(accepted) < len(candidates):
        logger.warning(
            f"⚠️  Dropped {len(candidates) - len(accepted)} {category.value} queries "
            f"violating the brand-token rule"
        )

    if len(accepted) > count:
        accepted = accepted[:count]

    logger.info(f"✓ Generated {len(accepted)} {category.value} queries")
    return [
        GeneratedQuery(text=text, category=category, language=site.language)
        for text in accepted
    ]


def generate_all_queries(
    client: GenerativeClient,
    site: SiteProfile,
    counts: CategoryCounts,
    model: str,
    deadline: Optional[Deadline] = None
) -> Dict[IntentCategory, List[GeneratedQuery]]:
    """Generate queries for every category in [direct, intermediate, indirect] order."""
    return {
        category: generate_queries_for_category(
            client, site, category, counts.get(category), model, deadline
        )
        for category in CATEGORY_ORDER
    }
