"""
Polymorphic analysis workflows.

Both strategies take the same inputs, share the data model, scoring engine
and record store, and return the persisted AnalysisRecord:

- MultiCallWorkflow: query generation, then research + brand extraction per
  query, brand-count scoring, suggestions.
- SingleCallWorkflow: one strict-schema web-search call, rank-weighted
  scoring only when the service's scores are unusable.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from agents.brand_workflow_agent import run_brand_workflow
from agents.site_scan_agent import run_site_scan
from models.schemas import (
    AnalysisRecord,
    AnalysisStrategy,
    CategoryCounts,
    SiteProfile,
    SiteRecord,
    WorkflowOptions
)
from storage.analysis_store import AnalysisStore
from utils.deadline import Deadline
from utils.llm_client import GenerativeClient

logger = logging.getLogger(__name__)


class AnalysisWorkflow(ABC):
    """
    One full per-site analysis run under a fixed execution strategy.

    Args:
        client: Generative call adapter
        store: Analysis record store
        options: Models, per-query timeout and parallelism
        timeout_seconds: Budget for the whole run
    """

    strategy: AnalysisStrategy

    def __init__(
        self,
        client: GenerativeClient,
        store: AnalysisStore,
        options: WorkflowOptions,
        timeout_seconds: float
    ):
        self.client = client
        self.store = store
        self.options = options
        self.timeout_seconds = timeout_seconds

    def run(
        self,
        owner_id: str,
        site_record: SiteRecord,
        profile: SiteProfile,
        counts: CategoryCounts,
        progress_callback=None,
        deadline: Optional[Deadline] = None
    ) -> AnalysisRecord:
        deadline = deadline or Deadline(self.timeout_seconds, label=f"{self.strategy.value} run")
        logger.info(f"▶️  {self.strategy.value} analysis for site {site_record.site_id} ({deadline})")
        return self._execute(owner_id, site_record.site_id, profile, counts, deadline, progress_callback)

    @abstractmethod
    def _execute(
        self,
        owner_id: str,
        site_id: str,
        profile: SiteProfile,
        counts: CategoryCounts,
        deadline: Deadline,
        progress_callback
    ) -> AnalysisRecord:
        pass


class MultiCallWorkflow(AnalysisWorkflow):
    strategy = AnalysisStrategy.MULTI_CALL

    def _execute(self, owner_id, site_id, profile, counts, deadline, progress_callback):
        return run_brand_workflow(
            owner_id, site_id, profile, counts,
            self.client, self.store, deadline, self.options,
            progress_callback=progress_callback
        )


class SingleCallWorkflow(AnalysisWorkflow):
    strategy = AnalysisStrategy.SINGLE_CALL

    def _execute(self, owner_id, site_id, profile, counts, deadline, progress_callback):
        return run_site_scan(
            owner_id, site_id, profile, counts,
            self.client, self.store, deadline, self.options,
            progress_callback=progress_callback
        )


WORKFLOWS = {
    AnalysisStrategy.MULTI_CALL: MultiCallWorkflow,
    AnalysisStrategy.SINGLE_CALL: SingleCallWorkflow,
}


def get_workflow(
    strategy,
    client: GenerativeClient,
    store: AnalysisStore,
    options: WorkflowOptions,
    timeout_seconds: float
) -> AnalysisWorkflow:
    """
    Build the workflow for a strategy name.

    Raises:
        ValueError: Unknown strategy
    """
    try:
        workflow_class = WORKFLOWS[AnalysisStrategy(strategy)]
    except ValueError:
        raise ValueError(f"Unknown analysis strategy: {strategy}") from None
    return workflow_class(client, store, options, timeout_seconds)
