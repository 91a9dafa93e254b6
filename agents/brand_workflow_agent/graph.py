"""
LangGraph workflow definition for the multi-call brand analysis.

  generate_queries → select_next_category → process_category → (loop or score)
  → score_analysis → generate_suggestions → persist_analysis → finalize
"""

import logging

from langgraph.graph import END, START, StateGraph

from agents.brand_workflow_agent.models import BrandWorkflowState
from agents.brand_workflow_agent.nodes import (
    finalize,
    generate_queries,
    persist_analysis,
    process_category,
    score_analysis,
    select_next_category,
    suggest_improvements
)
from models.schemas import AnalysisRecord, CategoryCounts, SiteProfile, WorkflowOptions
from storage.analysis_store import AnalysisStore
from utils.deadline import Deadline
from utils.llm_client import GenerativeClient

logger = logging.getLogger(__name__)


# Singleton graph instance
_graph = None


def should_continue_processing(state: BrandWorkflowState) -> str:
    """Conditional edge: another category, or move on to scoring."""
    if state.get("categories_to_process"):
        return "continue"
    return "score"


def create_brand_workflow_graph():
    """Create the LangGraph workflow for the multi-call strategy."""
    workflow = StateGraph(BrandWorkflowState)

    workflow.add_node("generate_queries", generate_queries)
    workflow.add_node("select_next_category", select_next_category)
    workflow.add_node("process_category", process_category)
    workflow.add_node("score_analysis", score_analysis)
    workflow.add_node("generate_suggestions", suggest_improvements)
    workflow.add_node("persist_analysis", persist_analysis)
    workflow.add_node("finalize", finalize)

    workflow.add_edge(START, "generate_queries")
    workflow.add_edge("generate_queries", "select_next_category")
    workflow.add_edge("select_next_category", "process_category")

    workflow.add_conditional_edges(
        "process_category",
        should_continue_processing,
        {
            "continue": "select_next_category",
            "score": "score_analysis"
        }
    )

    workflow.add_edge("score_analysis", "generate_suggestions")
    workflow.add_edge("generate_suggestions", "persist_analysis")
    workflow.add_edge("persist_analysis", "finalize")
    workflow.add_edge("finalize", END)

    return workflow.compile()


def get_brand_workflow_graph():
    """Get or create the multi-call workflow graph."""
    global _graph
    if _graph is None:
        _graph = create_brand_workflow_graph()
    return _graph


def run_brand_workflow(
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
    Run the multi-call workflow and return the persisted record.

    Any stage failure propagates as its AnalysisError subclass; nothing is
    persisted unless every stage before persistence succeeded.

    Args:
        owner_id: Owner of the site
        site_id: Stored site id
        site: Site profile
        counts: Normalized per-category query counts
        client: Generative call adapter
        store: Analysis record store
        deadline: Run deadline; per-query deadlines nest inside it
        options: Models, per-query timeout and parallelism
        progress_callback: Optional callback function(step, status, message, data)

    Returns:
        The persisted AnalysisRecord
    """
    graph = get_brand_workflow_graph()

    initial_state = {
        "owner_id": owner_id,
        "site_id": site_id,
        "site": site,
        "counts": counts,
        "completed": False
    }
    config = {
        "recursion_limit": 50,
        "configurable": {
            "client": client,
            "store": store,
            "deadline": deadline,
            "options": options
        }
    }

    logger.info(f"🚀 Starting multi-call analysis for {site.url}")
    logger.info(f"   Queries: direct={counts.direct} intermediate={counts.intermediate} indirect={counts.indirect}")

    state = initial_state
    for step_output in graph.stream(initial_state, config=config):
        node_name = list(step_output.keys())[0]
        state = step_output[node_name]

        if progress_callback:
            if node_name == "generate_queries":
                progress_callback(
                    "query_generation",
                    "completed",
                    f"Generated {len(state['all_queries'])} queries",
                    {"queries": state["category_queries"]}
                )
            elif node_name == "process_category":
                completed = state.get("completed_categories", [])
                category = state["current_category"]
                progress_callback(
                    "category_complete",
                    "in_progress",
                    f"Category '{category}' processed",
                    {
                        "category": category,
                        "results": [
                            result.model_dump(mode="json")
                            for result in state["analysis"].group(category).queries
                        ],
                        "progress": f"{len(completed)}/3"
                    }
                )
            elif node_name == "score_analysis":
                scores = state["scores"]
                progress_callback(
                    "scoring",
                    "completed",
                    f"Visibility score: {scores.visibility:.1f}%",
                    scores.model_dump()
                )
            elif node_name == "generate_suggestions":
                progress_callback(
                    "suggestions",
                    "completed",
                    f"Generated {len(state['suggestions'])} suggestions",
                    None
                )
            elif node_name == "finalize":
                progress_callback(
                    "complete",
                    "success",
                    f"Analysis complete! Visibility score: {state['record'].scores.visibility:.1f}%",
                    {"record_id": state["record"].record_id}
                )

    return state["record"]
