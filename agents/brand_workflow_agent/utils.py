"""
Utility functions for the multi-call brand workflow.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List

from langchain_core.runnables import RunnableConfig

from agents.brand_extractor import extract_brands
from agents.research_collector import collect_research
from models.errors import AnalysisError
from models.schemas import QueryBrandResult, SiteProfile, WorkflowOptions
from utils.deadline import Deadline
from utils.llm_client import GenerativeClient

logger = logging.getLogger(__name__)


def get_dependencies(config: RunnableConfig) -> Dict[str, Any]:
    """Pull the injected client, store, deadline and options out of the run config."""
    configurable = (config or {}).get("configurable", {})
    missing = [key for key in ("client", "store", "deadline", "options") if key not in configurable]
    if missing:
        raise ValueError(f"Missing workflow dependencies: {', '.join(missing)}")
    return configurable


def process_single_query(
    client: GenerativeClient,
    site: SiteProfile,
    query: str,
    options: WorkflowOptions,
    run_deadline: Deadline
) -> QueryBrandResult:
    """Research one query, then extract its brands, under one per-query deadline."""
    deadline = run_deadline.child(options.query_timeout_seconds, label=f"query {query!r}")

    note = collect_research(client, site, query, options.research_model, deadline)
    brands = extract_brands(client, note, options.extraction_model, deadline)

    return QueryBrandResult(query=query, brands=brands)


def process_category_queries(
    client: GenerativeClient,
    site: SiteProfile,
    category: str,
    queries: List[str],
    options: WorkflowOptions,
    run_deadline: Deadline
) -> List[QueryBrandResult]:
    """
    Process every query of one category, keeping query order.

    Blank queries are skipped. The first failing query aborts the batch and
    its error propagates unchanged. With ``max_parallel_queries > 1`` the
    calls run on a thread pool, but results are still collected here, in
    order, by the calling thread.
    """
    queries = [query.strip() for query in queries if query and query.strip()]
    if not queries:
        return []

    workers = min(options.max_parallel_queries, len(queries))
    results: List[QueryBrandResult] = []

    if workers <= 1:
        for query in queries:
            try:
                results.append(process_single_query(client, site, query, options, run_deadline))
            except AnalysisError as e:
                logger.error(f"❌ processing {category} query {query!r} failed: {e}")
                raise
        return results

    logger.info(f"⚡ Processing {len(queries)} {category} queries with {workers} workers")

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [
            executor.submit(process_single_query, client, site, query, options, run_deadline)
            for query in queries
        ]
        for query, future in zip(queries, futures):
            try:
                results.append(future.result())
            except Exception as e:
                logger.error(f"❌ processing {category} query {query!r} failed: {e}")
                for pending in futures:
                    pending.cancel()
                raise

    return results
