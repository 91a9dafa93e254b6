"""
Tests for the command-line entry point and its storage failure path.
"""

import json

import pytest

import config.database
import run_analysis
from graph_orchestrator import list_analyses, run_analysis as run
from models.errors import PersistenceError

from tests.conftest import OWNER_ID, ScriptedClient


@pytest.fixture
def redis_down(monkeypatch):
    def unreachable():
        raise ConnectionError("Redis connection failed: connection refused")

    monkeypatch.setattr(config.database, "get_redis_client", unreachable)


def test_unreachable_redis_is_a_persistence_error(redis_down, site):
    client = ScriptedClient([])

    with pytest.raises(PersistenceError) as exc_info:
        run(OWNER_ID, site, None, "multi_call", client=client)

    assert "connection refused" in exc_info.value.message
    assert client.calls == []

    with pytest.raises(PersistenceError):
        list_analyses(OWNER_ID, "site-1")


def test_cli_reports_storage_failure_as_json(redis_down, capsys):
    exit_code = run_analysis.main([
        "--owner", OWNER_ID, "--name", "Zentrix Labs", "--url", "https://www.zentrix.io",
        "--strategy", "single_call",
    ])

    assert exit_code == 1
    error = json.loads(capsys.readouterr().err)
    assert error["category"] == "persistence"
