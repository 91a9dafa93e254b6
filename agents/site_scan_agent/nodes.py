"""
Node functions for the single-call site scan.
"""

import logging

from langchain_core.runnables import RunnableConfig

from agents.brand_workflow_agent.utils import get_dependencies
from agents.site_scan_agent.models import SiteScanState
from agents.site_scan_agent.utils import build_scan_prompt, normalize_scan_result, parse_scan_result
from models.errors import PersistenceError
from models.schemas import AnalysisRecord, AnalysisStrategy
from utils.llm_client import WEB_SEARCH

logger = logging.getLogger(__name__)


def request_scan(state: SiteScanState, config: RunnableConfig) -> SiteScanState:
    """Node: One web-search-enabled call returning the whole analysis."""
    deps = get_dependencies(config)
    site = state["site"]

    logger.info(f"🌐 Requesting single-call scan for {site.url}")

    state["raw_text"] = deps["client"].generate(
        deps["options"].scan_model,
        build_scan_prompt(site, state["counts"]),
        tools=[WEB_SEARCH],
        tool_choice="auto",
        deadline=deps["deadline"]
    )
    return state


def parse_scan(state: SiteScanState) -> SiteScanState:
    """Node: Extract and validate the scan JSON."""
    state["result"] = parse_scan_result(state["raw_text"])
    logger.info(f"✓ Parsed scan: {len(state['result'].per_query_results)} per-query results")
    return state


def normalize_scan(state: SiteScanState) -> SiteScanState:
    """Node: Enforce limits, mark mentions and settle the scores."""
    result, scores, recomputed = normalize_scan_result(state["result"], state["site"], state["counts"])

    logger.info(
        f"📊 Scan scores: direct={scores.direct} intermediate={scores.intermediate} "
        f"indirect={scores.indirect} visibility={scores.visibility} (recomputed={recomputed})"
    )

    state["result"] = result
    state["scores"] = scores
    state["recomputed_scores"] = recomputed
    return state


def persist_scan(state: SiteScanState, config: RunnableConfig) -> SiteScanState:
    """Node: Write the single analysis record for this scan."""
    deps = get_dependencies(config)
    result = state["result"]
    payload = result.model_dump(mode="json", by_alias=True)

    record = AnalysisRecord(
        owner_id=state["owner_id"],
        site_id=state["site_id"],
        site_url=state["site"].url,
        strategy=AnalysisStrategy.SINGLE_CALL,
        scores=state["scores"],
        queries=result.all_of_the_queries_used,
        suggestions=result.suggestions,
        keywords=result.keywords_from_the_queries,
        citations=result.citations,
        analysis=payload
    )

    try:
        record_id = deps["store"].create_analysis_record(record)
    except PersistenceError as e:
        logger.error(f"❌ Scan save failed for {state['site'].url}; returning computed results")
        raise PersistenceError(
            e.message,
            analysis=payload,
            suggestions=result.suggestions,
            queries=result.all_of_the_queries_used,
            scores=state["scores"].model_dump()
        ) from e

    state["record"] = record.model_copy(update={"record_id": record_id})
    return state


def finalize(state: SiteScanState) -> SiteScanState:
    """Node: Mark the scan complete."""
    logger.info(f"✅ Scan {state['record'].record_id} complete")
    state["completed"] = True
    return state
