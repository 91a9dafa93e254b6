"""
Node functions for the multi-call brand workflow.
"""

import logging

from langchain_core.runnables import RunnableConfig

from agents.brand_workflow_agent.models import BrandWorkflowState
from agents.brand_workflow_agent.utils import get_dependencies, process_category_queries
from agents.query_generator import generate_all_queries
from agents.scorer_analyzer import BrandCountScoring
from agents.suggestion_generator import MULTI_CALL_SUGGESTION_LIMIT, generate_suggestions
from models.errors import PersistenceError
from models.schemas import (
    CATEGORY_ORDER,
    AnalysisRecord,
    AnalysisStrategy,
    FinalAnalysis
)
from utils.helpers import deduplicate_queries

logger = logging.getLogger(__name__)


def generate_queries(state: BrandWorkflowState, config: RunnableConfig) -> BrandWorkflowState:
    """Node: Generate direct, intermediate and indirect queries, in that order."""
    deps = get_dependencies(config)
    options = deps["options"]
    site = state["site"]

    logger.info(f"🎯 Generating queries for {site.url}")

    generated = generate_all_queries(
        deps["client"], site, state["counts"], options.query_model, deps["deadline"]
    )

    category_queries = {
        category.value: [query.text for query in generated[category]]
        for category in CATEGORY_ORDER
    }
    all_queries = deduplicate_queries(
        query for category in CATEGORY_ORDER for query in category_queries[category.value]
    )

    logger.info(f"✓ Total unique queries: {len(all_queries)}")

    state["category_queries"] = category_queries
    state["all_queries"] = all_queries
    state["categories_to_process"] = [category.value for category in CATEGORY_ORDER]
    state["completed_categories"] = []
    state["current_category"] = None
    state["analysis"] = FinalAnalysis()
    return state


def select_next_category(state: BrandWorkflowState) -> BrandWorkflowState:
    """Node: Pop the next category off the queue."""
    remaining = list(state.get("categories_to_process", []))
    current = remaining.pop(0) if remaining else None

    logger.info(f"📂 Next category: {current} ({len(remaining)} left after it)")

    state["current_category"] = current
    state["categories_to_process"] = remaining
    return state


def process_category(state: BrandWorkflowState, config: RunnableConfig) -> BrandWorkflowState:
    """Node: Research and extract brands for every query of the current category."""
    deps = get_dependencies(config)
    category = state["current_category"]
    queries = state["category_queries"].get(category, [])

    logger.info(f"🔬 Processing {len(queries)} {category} queries")

    results = process_category_queries(
        deps["client"], state["site"], category, queries, deps["options"], deps["deadline"]
    )

    state["analysis"].group(category).queries = results
    state["completed_categories"] = state.get("completed_categories", []) + [category]

    logger.info(f"✓ Category {category}: {sum(len(r.brands) for r in results)} brands")
    return state


def score_analysis(state: BrandWorkflowState) -> BrandWorkflowState:
    """Node: Brand-count scoring over the finished analysis."""
    state["scores"] = BrandCountScoring().score(state["analysis"], state["counts"])
    return state


def suggest_improvements(state: BrandWorkflowState, config: RunnableConfig) -> BrandWorkflowState:
    """Node: Generate recommendations from the complete analysis."""
    deps = get_dependencies(config)

    state["suggestions"] = generate_suggestions(
        deps["client"],
        state["site"],
        state["analysis"].model_dump(mode="json"),
        deps["options"].suggestion_model,
        deps["deadline"],
        limit=MULTI_CALL_SUGGESTION_LIMIT
    )
    return state


def persist_analysis(state: BrandWorkflowState, config: RunnableConfig) -> BrandWorkflowState:
    """
    Node: Write the single analysis record for this run.

    A failed write still hands the computed analysis back through
    PersistenceError.
    """
    deps = get_dependencies(config)
    site = state["site"]
    analysis_payload = state["analysis"].model_dump(mode="json")

    record = AnalysisRecord(
        owner_id=state["owner_id"],
        site_id=state["site_id"],
        site_url=site.url,
        strategy=AnalysisStrategy.MULTI_CALL,
        scores=state["scores"],
        queries=state["all_queries"],
        suggestions=state["suggestions"],
        analysis=analysis_payload
    )

    try:
        record_id = deps["store"].create_analysis_record(record)
    except PersistenceError as e:
        logger.error(f"❌ Persisting analysis for {site.url} failed; returning computed results")
        raise PersistenceError(
            e.message,
            analysis=analysis_payload,
            suggestions=state["suggestions"],
            queries=state["all_queries"],
            scores=state["scores"].model_dump()
        ) from e

    state["record"] = record.model_copy(update={"record_id": record_id})
    return state


def finalize(state: BrandWorkflowState) -> BrandWorkflowState:
    """Node: Mark the run complete."""
    record = state["record"]
    logger.info(f"✅ Analysis {record.record_id} complete: visibility={record.scores.visibility}")
    state["completed"] = True
    return state
