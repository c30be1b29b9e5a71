"""Shared fixtures and fakes for the aggregator tests."""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio

from config import Settings
from services.cache import TTLCache
from services.upstream import UpstreamClient

BASE_URL = "http://upstream.test"


class FakeClock:
    """Manually advanced replacement for ``time.time``."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUpstream:
    """In-process stand-in for the upstream API, served via httpx.MockTransport."""

    def __init__(self):
        self.users: dict[str, str] = {}
        self.user_posts: dict[str, list] = {}
        self.posts: list[dict] = []
        self.fail = False
        self.fail_users: set[str] = set()
        self.calls: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if self.fail:
            return httpx.Response(503, json={"error": "unavailable"})

        path = request.url.path
        if path == "/test/users":
            return httpx.Response(200, json={"data": self.users})
        if path == "/test/posts":
            return httpx.Response(200, json={"data": self.posts})
        if path.startswith("/test/users/") and path.endswith("/posts"):
            user_id = path.split("/")[3]
            if user_id in self.fail_users:
                return httpx.Response(500, json={"error": "boom"})
            return httpx.Response(200, json={"data": self.user_posts.get(user_id, [])})
        return httpx.Response(404, json={"error": "not found"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def seed_counts(self, counts: dict[str, int]) -> None:
        """Register one user per id with ``count`` placeholder posts each."""
        self.users = {user_id: f"User {user_id}" for user_id in counts}
        self.user_posts = {
            user_id: [{"id": f"{user_id}-{i}"} for i in range(count)]
            for user_id, count in counts.items()
        }


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache(clock=clock)


@pytest.fixture
def fake_upstream():
    return FakeUpstream()


@pytest_asyncio.fixture
async def upstream_client(fake_upstream):
    async with UpstreamClient(BASE_URL, auth_token="secret-token", transport=fake_upstream.transport) as client:
        yield client


@pytest.fixture
def test_settings():
    s = Settings()
    s.api_base_url = BASE_URL
    s.auth_token = "secret-token"
    s.cors_origins = ["*"]
    s.environment = "test"
    return s
