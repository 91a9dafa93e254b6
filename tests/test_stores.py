"""
Tests for analysis record storage and site lookup, in memory and on Redis.
"""

from datetime import datetime, timedelta, timezone

import pytest

from models.errors import PersistenceError, SiteNotFound
from models.schemas import AnalysisRecord, AnalysisStrategy, ScoreSet, SiteProfile
from storage.analysis_store import (
    InMemoryAnalysisStore,
    RedisAnalysisStore,
    get_store_key
)
from storage.site_directory import (
    InMemorySiteDirectory,
    RedisSiteDirectory,
    normalize_site_url
)

from tests.conftest import OWNER_ID, FakeRedis

BASE_TIME = datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc)


def make_record(site_id="site-1", owner_id=OWNER_ID, minutes=0, visibility=10.0):
    return AnalysisRecord(
        owner_id=owner_id,
        site_id=site_id,
        site_url="https://www.zentrix.io",
        strategy=AnalysisStrategy.SINGLE_CALL,
        scores=ScoreSet(direct=20.0, visibility=visibility),
        queries=["zentrix review"],
        analysis={"per_query_results": []},
        created_at=BASE_TIME + timedelta(minutes=minutes)
    )


@pytest.fixture(params=["memory", "redis"])
def analysis_store(request):
    if request.param == "memory":
        return InMemoryAnalysisStore()
    return RedisAnalysisStore(FakeRedis(), prefix="test")


@pytest.fixture(params=["memory", "redis"])
def directory(request):
    if request.param == "memory":
        return InMemorySiteDirectory()
    return RedisSiteDirectory(FakeRedis(), prefix="test")


def test_store_key():
    assert get_store_key("brandvis", "analyses", "42", "site-1") == "brandvis:analyses:42:site-1"


def test_score_set_rejects_out_of_range():
    with pytest.raises(ValueError):
        ScoreSet(direct=120.0)


def test_create_assigns_id_and_round_trips(analysis_store):
    record_id = analysis_store.create_analysis_record(make_record())

    loaded = analysis_store.get_analysis_record(record_id)

    assert loaded.record_id == record_id
    assert loaded.scores.direct == 20.0
    assert loaded.created_at == BASE_TIME


def test_list_newest_first_and_scoped(analysis_store):
    older = analysis_store.create_analysis_record(make_record(minutes=0))
    newer = analysis_store.create_analysis_record(make_record(minutes=5))
    analysis_store.create_analysis_record(make_record(site_id="site-2", minutes=10))
    analysis_store.create_analysis_record(make_record(owner_id="owner-2", minutes=15))

    records = analysis_store.list_analysis_records(OWNER_ID, "site-1")

    assert [r.record_id for r in records] == [newer, older]


def test_missing_record(analysis_store):
    assert analysis_store.get_analysis_record("nope") is None
    assert analysis_store.list_analysis_records(OWNER_ID, "site-1") == []


def test_redis_write_failure_raises_persistence_error():
    store = RedisAnalysisStore(FakeRedis(fail_writes=True), prefix="test")

    with pytest.raises(PersistenceError) as exc_info:
        store.create_analysis_record(make_record())

    assert exc_info.value.category == "persistence"


def test_redis_layout():
    fake = FakeRedis()
    store = RedisAnalysisStore(fake, prefix="test")

    record_id = store.create_analysis_record(make_record())

    assert f"test:analysis:{record_id}" in fake.data
    assert record_id in fake.zsets[f"test:analyses:{OWNER_ID}:site-1"]


def test_normalize_site_url():
    assert normalize_site_url(" https://www.Zentrix.io/ ") == "https://www.zentrix.io"


def test_register_is_idempotent(directory, site):
    first = directory.register_site(OWNER_ID, site)
    second = directory.register_site(OWNER_ID, SiteProfile(name="Zentrix", url="https://www.zentrix.io/"))

    assert first.site_id == second.site_id
    assert second.profile.name == "Zentrix Labs"


def test_find_and_get_site(directory, site):
    registered = directory.register_site(OWNER_ID, site)

    assert directory.find_site(OWNER_ID, "https://WWW.zentrix.io/").site_id == registered.site_id
    assert directory.get_site(OWNER_ID, registered.site_id).profile == site


def test_sites_are_owner_scoped(directory, site):
    registered = directory.register_site(OWNER_ID, site)

    with pytest.raises(SiteNotFound):
        directory.find_site("owner-2", site.url)
    with pytest.raises(SiteNotFound):
        directory.get_site("owner-2", registered.site_id)
    with pytest.raises(SiteNotFound):
        directory.get_site(OWNER_ID, "unknown")


def test_redis_register_failure():
    directory = RedisSiteDirectory(FakeRedis(fail_writes=True), prefix="test")

    with pytest.raises(PersistenceError):
        directory.register_site(OWNER_ID, SiteProfile(name="Zentrix Labs", url="https://www.zentrix.io"))


def test_failed_index_write_leaves_no_document():
    fake = FakeRedis(fail_commands={"zadd"})
    store = RedisAnalysisStore(fake, prefix="test")

    with pytest.raises(PersistenceError):
        store.create_analysis_record(make_record())

    assert fake.data == {}
    assert fake.zsets == {}
    assert store.list_analysis_records(OWNER_ID, "site-1") == []


def test_failed_owner_index_leaves_no_site():
    fake = FakeRedis(fail_commands={"hset"})
    directory = RedisSiteDirectory(fake, prefix="test")

    with pytest.raises(PersistenceError):
        directory.register_site(OWNER_ID, SiteProfile(name="Zentrix Labs", url="https://www.zentrix.io"))

    assert fake.data == {}
    assert fake.hashes == {}
