"""
Shared fixtures: scripted generative clients, an in-process Redis stand-in
and in-memory collaborators.
"""

import threading
from typing import Callable, Dict, List, Optional

import pytest
import redis

from models.schemas import CategoryCounts, SiteProfile, WorkflowOptions
from storage.analysis_store import InMemoryAnalysisStore
from storage.site_directory import InMemorySiteDirectory

OWNER_ID = "owner-1"


class ScriptedClient:
    """
    Returns the queued responses in call order.

    A queued exception is raised instead of returned.
    """

    def __init__(self, responses: List):
        self.responses = list(responses)
        self.calls: List[Dict] = []

    def generate(self, model, prompt, tools=None, tool_choice=None, deadline=None):
        self.calls.append({
            "model": model, "prompt": prompt, "tools": tools, "tool_choice": tool_choice
        })
        if deadline is not None:
            deadline.check(f"calling {model}")
        if not self.responses:
            raise AssertionError(f"unexpected generate call: {prompt[:80]!r}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class RoutingClient:
    """Answers each call through a handler(prompt, tools) function; safe across threads."""

    def __init__(self, handler: Callable[[str, Optional[list]], str]):
        self.handler = handler
        self.calls: List[Dict] = []
        self._lock = threading.Lock()

    def generate(self, model, prompt, tools=None, tool_choice=None, deadline=None):
        with self._lock:
            self.calls.append({"model": model, "prompt": prompt, "tools": tools})
        if deadline is not None:
            deadline.check(f"calling {model}")
        return self.handler(prompt, tools)


class FakePipeline:
    """Queues writes and applies them all on execute(), or none if one fails."""

    def __init__(self, client: "FakeRedis"):
        self.client = client
        self.commands: List = []

    def set(self, *args):
        self.commands.append(("set", args))
        return self

    def zadd(self, *args):
        self.commands.append(("zadd", args))
        return self

    def hset(self, *args):
        self.commands.append(("hset", args))
        return self

    def execute(self):
        commands, self.commands = self.commands, []
        for name, _ in commands:
            self.client._maybe_fail(name)
        return [getattr(self.client, name)(*args) for name, args in commands]


class FakeRedis:
    """Just enough of redis.Redis for the stores."""

    def __init__(self, fail_writes: bool = False, fail_commands=()):
        self.data: Dict[str, str] = {}
        self.zsets: Dict[str, Dict[str, float]] = {}
        self.hashes: Dict[str, Dict[str, str]] = {}
        self.fail_writes = fail_writes
        self.fail_commands = set(fail_commands)

    def _maybe_fail(self, command: str):
        if self.fail_writes or command in self.fail_commands:
            raise redis.ConnectionError("connection refused")

    def pipeline(self, transaction=True):
        return FakePipeline(self)

    def ping(self):
        return True

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self._maybe_fail("set")
        self.data[key] = value
        return True

    def zadd(self, name, mapping):
        self._maybe_fail("zadd")
        self.zsets.setdefault(name, {}).update(mapping)
        return len(mapping)

    def zrevrange(self, name, start, end):
        members = sorted(self.zsets.get(name, {}).items(), key=lambda item: (item[1], item[0]), reverse=True)
        members = [member for member, _ in members]
        return members[start:] if end == -1 else members[start:end + 1]

    def hset(self, name, key, value):
        self._maybe_fail("hset")
        self.hashes.setdefault(name, {})[key] = value
        return 1

    def hget(self, name, key):
        return self.hashes.get(name, {}).get(key)

    def close(self):
        pass


@pytest.fixture
def site():
    return SiteProfile(
        name="Zentrix Labs",
        url="https://www.zentrix.io",
        description="Project tracking software for small engineering teams",
        language="en"
    )


@pytest.fixture
def counts():
    return CategoryCounts(direct=1, intermediate=1, indirect=1)


@pytest.fixture
def options():
    return WorkflowOptions(query_timeout_seconds=30.0)


@pytest.fixture
def store():
    return InMemoryAnalysisStore()


@pytest.fixture
def sites(site):
    directory = InMemorySiteDirectory()
    directory.register_site(OWNER_ID, site)
    return directory


@pytest.fixture
def site_record(sites, site):
    return sites.find_site(OWNER_ID, site.url)


@pytest.fixture
def fake_redis():
    return FakeRedis()
