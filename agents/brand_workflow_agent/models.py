"""
State for the multi-call brand analysis graph.
"""

from typing import Dict, List, Optional, TypedDict

from models.schemas import (
    AnalysisRecord,
    CategoryCounts,
    FinalAnalysis,
    ScoreSet,
    SiteProfile
)


class BrandWorkflowState(TypedDict, total=False):
    """
    State for the multi-call workflow.

    Flow: generate queries → for each category (research → extract per query)
          → score → suggestions → persist
    """
    # Input
    owner_id: str
    site_id: str
    site: SiteProfile
    counts: CategoryCounts

    # Query generation
    category_queries: Dict[str, List[str]]  # category -> generated queries
    all_queries: List[str]  # deduplicated across categories

    # Category tracking
    categories_to_process: List[str]
    current_category: Optional[str]
    completed_categories: List[str]

    # Results
    analysis: FinalAnalysis
    scores: ScoreSet
    suggestions: List[str]
    record: AnalysisRecord

    completed: bool
