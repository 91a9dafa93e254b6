"""
Site lookup.

Sites are owned by a user and found by URL. A trailing slash and letter case
do not distinguish two URLs.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

import redis

from config.settings import settings
from models.errors import PersistenceError, SiteNotFound
from models.schemas import SiteProfile, SiteRecord
from storage.analysis_store import get_store_key
from utils.helpers import generate_record_id

logger = logging.getLogger(__name__)


def normalize_site_url(url: str) -> str:
    return (url or "").strip().rstrip("/").lower()


class SiteDirectory(ABC):

    @abstractmethod
    def find_site(self, owner_id: str, url: str) -> SiteRecord:
        """Raises SiteNotFound when the owner has no site at ``url``."""

    @abstractmethod
    def get_site(self, owner_id: str, site_id: str) -> SiteRecord:
        """Raises SiteNotFound unless ``site_id`` exists and belongs to ``owner_id``."""

    @abstractmethod
    def register_site(self, owner_id: str, profile: SiteProfile) -> SiteRecord:
        """Create (or return the existing) site for ``profile.url``."""


class InMemorySiteDirectory(SiteDirectory):

    def __init__(self):
        self.sites: Dict[str, SiteRecord] = {}

    def _by_url(self, owner_id: str, url: str) -> Optional[SiteRecord]:
        key = normalize_site_url(url)
        for record in self.sites.values():
            if record.owner_id == owner_id and normalize_site_url(record.profile.url) == key:
                return record
        return None

    def find_site(self, owner_id: str, url: str) -> SiteRecord:
        record = self._by_url(owner_id, url)
        if record is None:
            raise SiteNotFound(f"site {url} not found for owner {owner_id}")
        return record

    def get_site(self, owner_id: str, site_id: str) -> SiteRecord:
        record = self.sites.get(site_id)
        if record is None or record.owner_id != owner_id:
            raise SiteNotFound(f"site {site_id} not found for owner {owner_id}")
        return record

    def register_site(self, owner_id: str, profile: SiteProfile) -> SiteRecord:
        existing = self._by_url(owner_id, profile.url)
        if existing is not None:
            return existing
        record = SiteRecord(site_id=generate_record_id(), owner_id=owner_id, profile=profile)
        self.sites[record.site_id] = record
        return record


class RedisSiteDirectory(SiteDirectory):
    """
    Layout:
        {prefix}:site:{site_id}     JSON SiteRecord
        {prefix}:sites:{owner_id}   hash of normalized url -> site_id
    """

    def __init__(self, client: redis.Redis, prefix: str = None):
        self.client = client
        self.prefix = prefix or settings.REDIS_KEY_PREFIX

    def _site_key(self, site_id: str) -> str:
        return get_store_key(self.prefix, "site", site_id)

    def _owner_key(self, owner_id: str) -> str:
        return get_store_key(self.prefix, "sites", owner_id)

    def _load(self, site_id: str) -> Optional[SiteRecord]:
        raw = self.client.get(self._site_key(site_id))
        return SiteRecord.model_validate_json(raw) if raw else None

    def find_site(self, owner_id: str, url: str) -> SiteRecord:
        try:
            site_id = self.client.hget(self._owner_key(owner_id), normalize_site_url(url))
            record = self._load(site_id) if site_id else None
        except redis.RedisError as e:
            logger.error(f"❌ Site lookup failed for {url}: {e}")
            raise PersistenceError(f"site lookup failed: {e}") from e

        if record is None or record.owner_id != owner_id:
            raise SiteNotFound(f"site {url} not found for owner {owner_id}")
        return record

    def get_site(self, owner_id: str, site_id: str) -> SiteRecord:
        try:
            record = self._load(site_id)
        except redis.RedisError as e:
            logger.error(f"❌ Site lookup failed for {site_id}: {e}")
            raise PersistenceError(f"site lookup failed: {e}") from e

        if record is None or record.owner_id != owner_id:
            raise SiteNotFound(f"site {site_id} not found for owner {owner_id}")
        return record

    def register_site(self, owner_id: str, profile: SiteProfile) -> SiteRecord:
        try:
            return self.find_site(owner_id, profile.url)
        except SiteNotFound:
            pass

        record = SiteRecord(site_id=generate_record_id(), owner_id=owner_id, profile=profile)
        try:
            pipe = self.client.pipeline(transaction=True)
            pipe.set(self._site_key(record.site_id), json.dumps(record.model_dump(mode="json")))
            pipe.hset(self._owner_key(owner_id), normalize_site_url(profile.url), record.site_id)
            pipe.execute()
        except redis.RedisError as e:
            logger.error(f"❌ Failed to register site {profile.url}: {e}")
            raise PersistenceError(f"failed to register site: {e}") from e

        logger.info(f"✓ Registered site {profile.url} as {record.site_id}")
        return record
