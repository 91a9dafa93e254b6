"""
LangGraph workflow definition for the single-call site scan.
"""

import logging

from langgraph.graph import END, START, StateGraph

from agents.site_scan_agent.models import SiteScanState
from agents.site_scan_agent.nodes import (
    finalize,
    normalize_scan,
    parse_scan,
    persist_scan,
    request_scan
)
from models.schemas import AnalysisRecord, CategoryCounts, SiteProfile, WorkflowOptions
from storage.analysis_store import AnalysisStore
from utils.deadline import Deadline
from utils.llm_client import GenerativeClient

logger = logging.getLogger(__name__)


# Singleton graph instance
_graph = None


def create_site_scan_graph():
    """Create the LangGraph workflow for the single-call strategy."""
    workflow = StateGraph(SiteScanState)

    workflow.add_node("request_scan", request_scan)
    workflow.add_node("parse_scan", parse_scan)
    workflow.add_node("normalize_scan", normalize_scan)
    workflow.add_node("persist_analysis", persist_scan)
    workflow.add_node("finalize", finalize)

    workflow.add_edge(START, "request_scan")
    workflow.add_edge("request_scan", "parse_scan")
    workflow.add_edge("parse_scan", "normalize_scan")
    workflow.add_edge("normalize_scan", "persist_analysis")
    workflow.add_edge("persist_analysis", "finalize")
    workflow.add_edge("finalize", END)

    return workflow.compile()


def get_site_scan_graph():
    """Get or create the site scan graph."""
    global _graph
    if _graph is None:
        _graph = create_site_scan_graph()
    return _graph


def run_site_scan(
    owner_id: str,
    site_id: str,
    site: SiteProfile,
    counts: CategoryCounts,
    client: GenerativeClient,
    store: AnalysisStore,
    deadline: Deadline,
    options: WorkflowOptions,
    progress_callback=None
) -> AnalysisRecord:
    """
    Run the single-call scan and return the persisted record.

    Args:
        owner_id: Owner of the site
        site_id: Stored site id
        site: Site profile
        counts: Normalized per-category query counts
        client: Generative call adapter (low temperature recommended)
        store: Analysis record store
        deadline: Run deadline
        options: Model selection
        progress_callback: Optional callback function(step, status, message, data)

    Returns:
        The persisted AnalysisRecord
    """
    graph = get_site_scan_graph()

    initial_state = {
        "owner_id": owner_id,
        "site_id": site_id,
        "site": site,
        "counts": counts,
        "completed": False
    }
    config = {
        "configurable": {
            "client": client,
            "store": store,
            "deadline": deadline,
            "options": options
        }
    }

    logger.info(f"🚀 Starting single-call scan for {site.url}")

    state = initial_state
    for step_output in graph.stream(initial_state, config=config):
        node_name = list(step_output.keys())[0]
        state = step_output[node_name]

        if progress_callback:
            if node_name == "request_scan":
                progress_callback("scan", "in_progress", "Scan response received", None)
            elif node_name == "normalize_scan":
                scores = state["scores"]
                progress_callback(
                    "scoring",
                    "completed",
                    f"Visibility score: {scores.visibility:.1f}%",
                    {**scores.model_dump(), "recomputed": state["recomputed_scores"]}
                )
            elif node_name == "finalize":
                progress_callback(
                    "complete",
                    "success",
                    f"Scan complete! Visibility score: {state['record'].scores.visibility:.1f}%",
                    {"record_id": state["record"].record_id}
                )

    return state["record"]
