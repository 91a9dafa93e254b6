"""
Tests for both scoring strategies.
"""

import pytest

from agents.scorer_analyzer import (
    BrandCountScoring,
    RankWeightedScoring,
    build_score_set,
    visibility_score
)
from models.schemas import (
    BrandCitation,
    CategoryCounts,
    CategoryGroup,
    FinalAnalysis,
    IntentCategory,
    PerQueryResult,
    QueryBrandResult,
    RankedSearchHit
)


def brands(n):
    return [BrandCitation(name=f"Brand {i}") for i in range(n)]


def hit(rank, mention=True):
    return RankedSearchHit(rank=rank, url=f"https://site{rank}.com", is_mention=mention)


def test_visibility_zero_when_all_zero():
    assert visibility_score(0, 0, 0) == 0.0


def test_visibility_weights():
    assert visibility_score(100, 0, 0) == 50.0
    assert visibility_score(0, 100, 0) == 30.0
    assert visibility_score(0, 0, 100) == 20.0
    assert visibility_score(100, 100, 100) == 100.0


@pytest.mark.parametrize("scores", [(0, 0, 0), (100, 100, 100), (12.5, 99.9, 0.1), (100, 0, 55)])
def test_visibility_within_bounds(scores):
    assert 0.0 <= visibility_score(*scores) <= 100.0


def test_score_set_clamps_inputs():
    score_set = build_score_set({
        IntentCategory.DIRECT: 140.0,
        IntentCategory.INTERMEDIATE: -5.0,
        IntentCategory.INDIRECT: 50.0,
    })
    assert (score_set.direct, score_set.intermediate, score_set.indirect) == (100.0, 0.0, 50.0)
    assert score_set.visibility == 60.0


def test_brand_count_scoring():
    analysis = FinalAnalysis(
        direct=CategoryGroup(queries=[
            QueryBrandResult(query="q1", brands=brands(3)),
            QueryBrandResult(query="q2", brands=brands(1)),
        ]),
        intermediate=CategoryGroup(queries=[QueryBrandResult(query="q3", brands=brands(5))]),
    )

    scores = BrandCountScoring().score(analysis, CategoryCounts(direct=2, intermediate=1, indirect=1))

    assert scores.direct == 20.0
    assert scores.intermediate == 50.0
    assert scores.indirect == 0.0
    assert scores.visibility == 25.0


def test_brand_count_denominator_floored():
    group = CategoryGroup(queries=[QueryBrandResult(query="q", brands=brands(0))])
    assert BrandCountScoring().category_score(group, 0) == 0.0
    assert BrandCountScoring().category_score(CategoryGroup(), 1) == 0.0


def test_brand_count_capped_at_100():
    group = CategoryGroup(queries=[QueryBrandResult(query="q", brands=brands(15))])
    assert BrandCountScoring().category_score(group, 1) == 100.0


def test_single_rank_one_mention_scores_100():
    results = [PerQueryResult(category=IntentCategory.DIRECT, query="zentrix review", results=[hit(1)])]

    scores = RankWeightedScoring().score(results)

    assert scores.direct == 100.0
    assert scores.intermediate == 0.0
    assert scores.visibility == 50.0


def test_rank_weighting_per_query():
    results = [
        PerQueryResult(category=IntentCategory.INTERMEDIATE, query="q1",
                       results=[hit(1, mention=False), hit(2), hit(5)]),
        PerQueryResult(category=IntentCategory.INTERMEDIATE, query="q2",
                       results=[hit(3), hit(4, mention=False)]),
    ]

    scores = RankWeightedScoring().score(results)

    # (0.8 + 0.2 + 0.6) / 2 queries
    assert scores.intermediate == 80.0
    assert scores.direct == 0.0


def test_unknown_rank_weighs_nothing():
    results = [PerQueryResult(category=IntentCategory.INDIRECT, query="q", results=[hit(7)])]
    assert RankWeightedScoring().score(results).indirect == 0.0
