"""
State for the single-call site scan graph.
"""

from typing import TypedDict

from models.schemas import AnalysisRecord, CategoryCounts, ScoreSet, SiteProfile, SiteScanResult


class SiteScanState(TypedDict, total=False):
    """
    State for the single-call workflow.

    Flow: request → parse → normalize → persist
    """
    # Input
    owner_id: str
    site_id: str
    site: SiteProfile
    counts: CategoryCounts

    # Processing
    raw_text: str
    result: SiteScanResult
    scores: ScoreSet
    recomputed_scores: bool

    # Output
    record: AnalysisRecord
    completed: bool
