"""
Scoring Engine

Pure scoring for both execution strategies. Each strategy produces the three
per-category scores; the visibility score is always derived from them the
same way:

    visibility = 0.5 * direct + 0.3 * intermediate + 0.2 * indirect

- BrandCountScoring (multi-call): brand entities found per category relative
  to MAX_BRANDS_PER_QUERY per configured query.
- RankWeightedScoring (single-call): rank-weighted mention hits per query.
"""

import logging
from typing import Dict, Iterable, List, Mapping

from models.schemas import (
    CATEGORY_ORDER,
    CategoryCounts,
    CategoryGroup,
    FinalAnalysis,
    IntentCategory,
    PerQueryResult,
    ScoreSet
)

logger = logging.getLogger(__name__)

CATEGORY_WEIGHTS = {
    IntentCategory.DIRECT: 0.5,
    IntentCategory.INTERMEDIATE: 0.3,
    IntentCategory.INDIRECT: 0.2,
}

RANK_WEIGHTS = {1: 1.0, 2: 0.8, 3: 0.6, 4: 0.4, 5: 0.2}

MAX_BRANDS_PER_QUERY = 10


def clamp_score(value: float) -> float:
    return round(min(max(float(value), 0.0), 100.0), 2)


def ratio_score(numerator: float, denominator: float) -> float:
    """(numerator / denominator) * 100 with the denominator floored to 1."""
    return clamp_score(numerator / max(denominator, 1) * 100.0)


def visibility_score(direct: float, intermediate: float, indirect: float) -> float:
    return clamp_score(
        CATEGORY_WEIGHTS[IntentCategory.DIRECT] * direct
        + CATEGORY_WEIGHTS[IntentCategory.INTERMEDIATE] * intermediate
        + CATEGORY_WEIGHTS[IntentCategory.INDIRECT] * indirect
    )


def build_score_set(category_scores: Mapping[IntentCategory, float]) -> ScoreSet:
    """Clamp the three category scores and derive the visibility score."""
    direct = clamp_score(category_scores.get(IntentCategory.DIRECT, 0.0))
    intermediate = clamp_score(category_scores.get(IntentCategory.INTERMEDIATE, 0.0))
    indirect = clamp_score(category_scores.get(IntentCategory.INDIRECT, 0.0))
    return ScoreSet(
        direct=direct,
        intermediate=intermediate,
        indirect=indirect,
        visibility=visibility_score(direct, intermediate, indirect)
    )


class BrandCountScoring:
    """Category score = brands / (MAX_BRANDS_PER_QUERY * configured count) * 100."""

    name = "brand_count"

    def __init__(self, max_brands_per_query: int = MAX_BRANDS_PER_QUERY):
        self.max_brands_per_query = max_brands_per_query

    @staticmethod
    def count_brands(group: CategoryGroup) -> int:
        return sum(len(result.brands) for result in group.queries)

    def category_score(self, group: CategoryGroup, configured_count: int) -> float:
        return ratio_score(self.count_brands(group), self.max_brands_per_query * configured_count)

    def score(self, analysis: FinalAnalysis, counts: CategoryCounts) -> ScoreSet:
        scores = {
            category: self.category_score(analysis.group(category), counts.get(category))
            for category in CATEGORY_ORDER
        }
        score_set = build_score_set(scores)
        logger.info(
            f"📊 Brand-count scores: direct={score_set.direct} "
            f"intermediate={score_set.intermediate} indirect={score_set.indirect} "
            f"visibility={score_set.visibility}"
        )
        return score_set


class RankWeightedScoring:
    """Category score = sum of rank weights of mention hits / queries in category * 100."""

    name = "rank_weighted"

    def __init__(self, rank_weights: Dict[int, float] = None):
        self.rank_weights = rank_weights or RANK_WEIGHTS

    def weighted_hits(self, results: Iterable[PerQueryResult]) -> float:
        return sum(
            self.rank_weights.get(hit.rank, 0.0)
            for result in results
            for hit in result.results
            if hit.is_mention
        )

    def category_score(self, per_query_results: List[PerQueryResult], category: IntentCategory) -> float:
        results = [result for result in per_query_results if result.category == category]
        return ratio_score(self.weighted_hits(results), len(results))

    def score(self, per_query_results: List[PerQueryResult]) -> ScoreSet:
        scores = {
            category: self.category_score(per_query_results, category)
            for category in CATEGORY_ORDER
        }
        score_set = build_score_set(scores)
        logger.info(
            f"📊 Rank-weighted scores: direct={score_set.direct} "
            f"intermediate={score_set.intermediate} indirect={score_set.indirect} "
            f"visibility={score_set.visibility}"
        )
        return score_set
