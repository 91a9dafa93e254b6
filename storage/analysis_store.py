"""
Analysis record storage.

Records are written once per successful run and never updated. Listing is
by owner and site, newest first.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

import redis

from config.settings import settings
from models.errors import PersistenceError
from models.schemas import AnalysisRecord
from utils.helpers import generate_record_id

logger = logging.getLogger(__name__)


def get_store_key(prefix: str, *args) -> str:
    """
    Build a namespaced Redis key.

    Example:
        >>> get_store_key("brandvis", "analysis", "42")
        'brandvis:analysis:42'
    """
    return ":".join([prefix] + [str(arg) for arg in args])


class AnalysisStore(ABC):
    """Create/list interface for persisted analysis records."""

    @abstractmethod
    def create_analysis_record(self, record: AnalysisRecord) -> str:
        """Persist a new record and return its id. Raises PersistenceError."""

    @abstractmethod
    def list_analysis_records(self, owner_id: str, site_id: str) -> List[AnalysisRecord]:
        """Records for one owner/site, newest first."""

    @abstractmethod
    def get_analysis_record(self, record_id: str) -> Optional[AnalysisRecord]:
        """One record by id, or None."""


class InMemoryAnalysisStore(AnalysisStore):
    """
    Dictionary-backed store for tests and local runs.

    Nothing survives the process.
    """

    def __init__(self):
        self.records: Dict[str, Tuple[int, AnalysisRecord]] = {}
        self._sequence = 0

    def create_analysis_record(self, record: AnalysisRecord) -> str:
        record_id = generate_record_id()
        self._sequence += 1
        self.records[record_id] = (self._sequence, record.model_copy(update={"record_id": record_id}))
        return record_id

    def list_analysis_records(self, owner_id: str, site_id: str) -> List[AnalysisRecord]:
        matching = [
            (sequence, record) for sequence, record in self.records.values()
            if record.owner_id == owner_id and record.site_id == site_id
        ]
        matching.sort(key=lambda item: (item[1].created_at, item[0]), reverse=True)
        return [record for _, record in matching]

    def get_analysis_record(self, record_id: str) -> Optional[AnalysisRecord]:
        entry = self.records.get(record_id)
        return entry[1] if entry else None


class RedisAnalysisStore(AnalysisStore):
    """
    Redis-backed store.

    Layout:
        {prefix}:analysis:{record_id}          JSON document
        {prefix}:analyses:{owner_id}:{site_id} sorted set of ids scored by created_at
    """

    def __init__(self, client: redis.Redis, prefix: str = None):
        self.client = client
        self.prefix = prefix or settings.REDIS_KEY_PREFIX

    def _record_key(self, record_id: str) -> str:
        return get_store_key(self.prefix, "analysis", record_id)

    def _index_key(self, owner_id: str, site_id: str) -> str:
        return get_store_key(self.prefix, "analyses", owner_id, site_id)

    def create_analysis_record(self, record: AnalysisRecord) -> str:
        record_id = generate_record_id()
        stored = record.model_copy(update={"record_id": record_id})

        try:
            # Document and index land together or not at all
            pipe = self.client.pipeline(transaction=True)
            pipe.set(self._record_key(record_id), stored.model_dump_json())
            pipe.zadd(
                self._index_key(record.owner_id, record.site_id),
                {record_id: stored.created_at.timestamp()}
            )
            pipe.execute()
        except redis.RedisError as e:
            logger.error(f"❌ Failed to store analysis record for site {record.site_id}: {e}")
            raise PersistenceError(f"failed to store analysis record: {e}") from e

        logger.info(f"💾 Stored analysis record {record_id} for site {record.site_id}")
        return record_id

    def list_analysis_records(self, owner_id: str, site_id: str) -> List[AnalysisRecord]:
        try:
            record_ids = self.client.zrevrange(self._index_key(owner_id, site_id), 0, -1)
            records = []
            for record_id in record_ids:
                raw = self.client.get(self._record_key(record_id))
                if raw:
                    records.append(AnalysisRecord.model_validate_json(raw))
        except redis.RedisError as e:
            logger.error(f"❌ Failed to list analysis records for site {site_id}: {e}")
            raise PersistenceError(f"failed to list analysis records: {e}") from e
        return records

    def get_analysis_record(self, record_id: str) -> Optional[AnalysisRecord]:
        try:
            raw = self.client.get(self._record_key(record_id))
        except redis.RedisError as e:
            logger.error(f"❌ Failed to load analysis record {record_id}: {e}")
            raise PersistenceError(f"failed to load analysis record: {e}") from e
        return AnalysisRecord.model_validate_json(raw) if raw else None
