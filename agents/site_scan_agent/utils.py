"""
Prompt and normalization helpers for the single-call site scan.
"""

import logging
from typing import List, Tuple

from pydantic import ValidationError

from agents.scorer_analyzer import RANK_WEIGHTS, RankWeightedScoring, build_score_set
from agents.suggestion_generator import SINGLE_CALL_SUGGESTION_LIMIT, clean_suggestions
from models.errors import MalformedAnalysis
from models.schemas import (
    CATEGORY_ORDER,
    MAX_HITS_PER_QUERY,
    SNIPPET_MAX_CHARS,
    CategoryCounts,
    IntentCategory,
    MentionReason,
    ScoreSet,
    ServiceScores,
    SiteProfile,
    SiteScanResult
)
from utils.helpers import brand_tokens, classify_mention, deduplicate_queries, registrable_domain
from utils.json_extractor import decode_json

logger = logging.getLogger(__name__)

MAX_KEYWORDS = 15
MAX_CITATIONS = 10


def build_scan_instructions(counts: CategoryCounts) -> str:
    """System instructions for the strict-schema scan."""
    weights = ", ".join(f"#{rank}={weight}" for rank, weight in sorted(RANK_WEIGHTS.items()))
    return f"""You are an AI SEO Analysis Agent.

INPUT (from user content):
- site.url
- site.name
- site.description
- site.language

DERIVE brand_tokens (lowercased):
- full brand name (site.name)
- brand split into tokens
- registrable domain root from site.url (e.g., "github.com" → "github")
- variants with/without hyphens/spaces
Example: "Acme Tools" + "https://www.acme-tools.io" → {{"acme","tools","acmetools","acme-tools","acme tools"}}.

YOUR TASK (STRICT):
1) Generate EXACTLY {counts.total()} queries TOTAL:
   A) {counts.direct} DIRECT: MUST contain at least one brand_token.
   B) {counts.intermediate} INTERMEDIATE: relevant task/topic query, MUST NOT contain ANY brand_token.
      Examples of modifiers: pricing, features, integration, tutorial, documentation, "how to ...", "best ... for ...".
   C) {counts.indirect} INDIRECT: broad adjacent topic a prospect searches BEFORE knowing the brand, MUST NOT contain ANY brand_token; avoid brand-unique terms.
   - All queries must be in the given language and at most 12 words.
   - No duplicates.
   - Self-validate: if INTERMEDIATE or INDIRECT accidentally contain any brand_token, regenerate them; if DIRECT lacks a brand_token, regenerate it.

2) For EACH query you MUST call 'web_search' and keep ONLY the TOP {MAX_HITS_PER_QUERY} results.
   For each result record: rank (1..{MAX_HITS_PER_QUERY}), url, domain, title, snippet (at most {SNIPPET_MAX_CHARS} chars).

3) MENTION LOGIC:
   is_mention = true if:
   - domain equals the target site's registrable domain, OR
   - title or snippet includes any brand_token (case-insensitive).
   mention_reason = "domain" | "brand_in_text" | null.

4) SCORING:
   weights: {weights}.
   For each type: score = (sum of weights for results with is_mention=true / number_of_queries_in_type) * 100.
   Overall visibility = 0.5*direct + 0.3*intermediate + 0.2*indirect.

5) LIMITS (to keep JSON small and stable):
   - keywords_from_the_queries: MAX {MAX_KEYWORDS} items, lowercase, deduped.
   - suggestions: MAX {SINGLE_CALL_SUGGESTION_LIMIT} items, each 1 sentence.
   - citations: MAX {MAX_CITATIONS} unique items, prefer URLs; fallback to domains.

6) OUTPUT: SINGLE JSON OBJECT ONLY (no prose, no markdown fences):
{{
  "site": {{ "name": "...", "url": "...", "description": "...", "language": "..." }},
  "queries": {{
    "direct": [ "<{counts.direct} items>" ],
    "intermediate": [ "<{counts.intermediate} items>" ],
    "indirect": [ "<{counts.indirect} items>" ]
  }},
  "per_query_results": [
    {{
      "type": "direct" | "intermediate" | "indirect",
      "query": "...",
      "results": [
        {{ "rank": 1, "title": "...", "url": "...", "domain": "...", "snippet": "...", "is_mention": true, "mention_reason": "domain" }}
      ]
    }}
  ],
  "scores": {{
    "direct_query_score": number,
    "intermediate_context_query_score": number,
    "indirect_query_score": number,
    "visibility_score": number
  }},
  "citations": [strings],
  "keywords_from_the_queries": [strings],
  "all_of_the_queries_used": [strings in order: direct, intermediate, indirect],
  "suggestions": [strings]
}}
If 'web_search' is unavailable, return the schema with empty arrays and zeros (still valid JSON).
"""


def build_scan_prompt(site: SiteProfile, counts: CategoryCounts) -> str:
    return (
        build_scan_instructions(counts)
        + "\n\nSite:\n"
        f"- Name: {site.name}\n"
        f"- URL: {site.url}\n"
        f"- Description: {site.description}\n"
        f"- Language: {site.language}\n\n"
        "Perform the SEO visibility analysis per the instructions above."
    )


def parse_scan_result(raw_text: str) -> SiteScanResult:
    """
    Raises:
        MalformedAnalysis: Not decodable, or not shaped like the scan schema
    """
    try:
        payload = decode_json(raw_text)
    except ValueError as e:
        logger.error(f"❌ Failed to parse scan JSON: {e}")
        raise MalformedAnalysis(f"failed to parse model JSON: {e}", raw_text) from e

    if not isinstance(payload, dict):
        raise MalformedAnalysis("scan JSON is not an object", raw_text)

    try:
        return SiteScanResult.model_validate(payload)
    except ValidationError as e:
        logger.error(f"❌ Scan JSON does not match the schema: {e}")
        raise MalformedAnalysis(f"invalid scan JSON: {e}", raw_text) from e


def _clean_strings(items: List[str], limit: int, lowercase: bool = False) -> List[str]:
    cleaned = []
    for item in items:
        text = item.strip()
        if lowercase:
            text = text.lower()
        if text and text not in cleaned:
            cleaned.append(text)
        if len(cleaned) >= limit:
            break
    return cleaned


def mark_mentions(result: SiteScanResult, site: SiteProfile) -> None:
    """
    Apply the mention rule locally and union it with the service's flags.

    A hit the service flagged stays flagged.
    """
    site_domain = registrable_domain(site.url)
    tokens = brand_tokens(site)

    for per_query in result.per_query_results:
        per_query.results = per_query.results[:MAX_HITS_PER_QUERY]
        for hit in per_query.results:
            local_reason = classify_mention(hit, site_domain, tokens)
            if local_reason != MentionReason.NONE:
                hit.is_mention = True
                if hit.mention_reason == MentionReason.NONE:
                    hit.mention_reason = local_reason
            elif not hit.is_mention:
                hit.mention_reason = MentionReason.NONE


def all_service_scores_zero(scores: ServiceScores) -> bool:
    return (
        scores.direct_query_score == 0
        and scores.intermediate_context_query_score == 0
        and scores.indirect_query_score == 0
    )


def normalize_scan_result(
    result: SiteScanResult,
    site: SiteProfile,
    counts: CategoryCounts
) -> Tuple[SiteScanResult, ScoreSet, bool]:
    """
    Normalize a decoded scan in place.

    Scores are recomputed locally only when there are per-query results and
    the service reported exactly zero for all three categories; otherwise
    the service's category scores are kept (clamped). Visibility is always
    derived from the three category scores.

    Returns:
        (result, score_set, recomputed)
    """
    for category in CATEGORY_ORDER:
        cleaned = deduplicate_queries(result.queries.get(category))
        setattr(result.queries, category.value, cleaned[:counts.get(category)])

    mark_mentions(result, site)

    used = result.all_of_the_queries_used
    if not any(query.strip() for query in used):
        used = [query for category in CATEGORY_ORDER for query in result.queries.get(category)]
    result.all_of_the_queries_used = deduplicate_queries(used)[:counts.total()]

    recomputed = bool(result.per_query_results) and all_service_scores_zero(result.scores)
    if recomputed:
        logger.warning("⚠️  Service reported all-zero scores; recomputing from per-query results")
        score_set = RankWeightedScoring().score(result.per_query_results)
    else:
        score_set = build_score_set({
            IntentCategory.DIRECT: result.scores.direct_query_score,
            IntentCategory.INTERMEDIATE: result.scores.intermediate_context_query_score,
            IntentCategory.INDIRECT: result.scores.indirect_query_score,
        })
    result.scores = ServiceScores(**score_set.to_wire())

    result.citations = _clean_strings(result.citations, MAX_CITATIONS)
    result.keywords_from_the_queries = _clean_strings(
        result.keywords_from_the_queries, MAX_KEYWORDS, lowercase=True
    )
    result.suggestions = clean_suggestions(result.suggestions, SINGLE_CALL_SUGGESTION_LIMIT)

    return result, score_set, recomputed
