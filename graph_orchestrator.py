"""
Analysis Orchestrator

Entry points used by the request layer: run one brand visibility analysis
for an owner's site under the configured strategy, and list or fetch past
analysis records.
"""

import logging
from typing import Dict, List, Optional, Union

from agents.visibility_orchestrator import get_workflow
from config.settings import build_llm_config, settings
from models.errors import AnalysisError, PersistenceError, RecordNotFound
from models.schemas import (
    AnalysisRecord,
    AnalysisStrategy,
    CategoryCounts,
    SiteProfile,
    WorkflowOptions
)
from storage.analysis_store import AnalysisStore, RedisAnalysisStore
from storage.site_directory import RedisSiteDirectory, SiteDirectory
from utils.llm_client import GenerativeClient

logger = logging.getLogger(__name__)


def default_category_counts() -> CategoryCounts:
    return CategoryCounts(
        direct=settings.DEFAULT_DIRECT_QUERIES,
        intermediate=settings.DEFAULT_INTERMEDIATE_QUERIES,
        indirect=settings.DEFAULT_INDIRECT_QUERIES
    )


def normalize_category_counts(counts: Union[CategoryCounts, Dict[str, int], None]) -> CategoryCounts:
    """
    Coerce request counts into CategoryCounts with every count at least 1.

    Example:
        >>> normalize_category_counts({"direct": 0, "intermediate": 3, "indirect": -2})
        CategoryCounts(direct=1, intermediate=3, indirect=1)
    """
    if counts is None:
        counts = default_category_counts()
    elif isinstance(counts, dict):
        counts = CategoryCounts(**{key: value for key, value in counts.items() if value is not None})
    return counts.normalized()


def _redis_client():
    from config.database import get_redis_client

    try:
        return get_redis_client()
    except ConnectionError as e:
        raise PersistenceError(f"analysis storage unavailable: {e}") from e


def _default_sites() -> SiteDirectory:
    return RedisSiteDirectory(_redis_client())


def _default_store() -> AnalysisStore:
    return RedisAnalysisStore(_redis_client())


def _default_client(strategy: AnalysisStrategy) -> GenerativeClient:
    temperature = settings.SCAN_TEMPERATURE if strategy == AnalysisStrategy.SINGLE_CALL else None
    return GenerativeClient(build_llm_config(settings, temperature=temperature))


def run_analysis(
    owner_id: str,
    site: SiteProfile,
    category_counts: Union[CategoryCounts, Dict[str, int], None] = None,
    strategy: Optional[str] = None,
    *,
    client: Optional[GenerativeClient] = None,
    sites: Optional[SiteDirectory] = None,
    store: Optional[AnalysisStore] = None,
    options: Optional[WorkflowOptions] = None,
    progress_callback=None
) -> AnalysisRecord:
    """
    Run one complete brand visibility analysis for an owner's site.

    The site must already be registered for the owner. Exactly one record is
    written, and only after every stage succeeded.

    Args:
        owner_id: Requesting owner
        site: Site profile (name, url, description, language)
        category_counts: Queries per category; non-positive counts become 1
        strategy: "multi_call" or "single_call" (defaults to settings)
        client: Generative call adapter (built from settings when omitted)
        sites: Site lookup (Redis-backed when omitted)
        store: Analysis record store (Redis-backed when omitted)
        options: Models and per-query knobs (from settings when omitted)
        progress_callback: Optional callback function(step, status, message, data)

    Returns:
        The persisted AnalysisRecord

    Raises:
        SiteNotFound: The owner has no site at ``site.url``
        PersistenceError: Redis is unreachable when no collaborators are passed
        AnalysisError: Any categorized stage failure. PersistenceError still
            carries the computed analysis, suggestions and queries.

    Example:
        >>> record = run_analysis(
        ...     owner_id="42",
        ...     site=SiteProfile(name="Acme Tools", url="https://acme-tools.io"),
        ...     category_counts={"direct": 2, "intermediate": 2, "indirect": 1}
        ... )
        >>> print(record.scores.visibility)
        37.5
    """
    counts = normalize_category_counts(category_counts)
    strategy = AnalysisStrategy(strategy or settings.ANALYSIS_STRATEGY)

    sites = sites or _default_sites()
    store = store or _default_store()
    client = client or _default_client(strategy)
    options = options or WorkflowOptions.from_settings(settings)

    site_record = sites.find_site(owner_id, site.url)

    timeout = (
        settings.SCAN_TIMEOUT_SECONDS if strategy == AnalysisStrategy.SINGLE_CALL
        else settings.RUN_TIMEOUT_SECONDS
    )
    workflow = get_workflow(strategy, client, store, options, timeout)

    try:
        record = workflow.run(owner_id, site_record, site, counts, progress_callback=progress_callback)
    except AnalysisError as e:
        logger.error(f"❌ {strategy.value} analysis for {site.url} failed [{e.category}]: {e.message}")
        raise

    logger.info(f"✅ Analysis {record.record_id} stored for {site.url}: visibility={record.scores.visibility}")
    return record


def list_analyses(
    owner_id: str,
    site_id: str,
    *,
    sites: Optional[SiteDirectory] = None,
    store: Optional[AnalysisStore] = None
) -> List[AnalysisRecord]:
    """
    Records for one of the owner's sites, newest first.

    Raises:
        SiteNotFound: The site does not exist or belongs to someone else
    """
    sites = sites or _default_sites()
    store = store or _default_store()

    sites.get_site(owner_id, site_id)
    return store.list_analysis_records(owner_id, site_id)


def get_analysis(owner_id: str, record_id: str, *, store: Optional[AnalysisStore] = None) -> AnalysisRecord:
    """
    Raises:
        RecordNotFound: No such record for this owner
    """
    store = store or _default_store()

    record = store.get_analysis_record(record_id)
    if record is None or record.owner_id != owner_id:
        raise RecordNotFound(f"analysis {record_id} not found for owner {owner_id}")
    return record
