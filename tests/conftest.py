# ABOUTME: Pytest fixtures and configuration for ContextForge declarative client tests
# ABOUTME: Provides an in-memory fake ContextForge API mounted through respx

import json
import os
from collections.abc import AsyncIterator, Iterator
from itertools import count
from typing import Any
from urllib.parse import unquote

import httpx
import pytest
import respx
from pydantic import SecretStr

from contextforge_iac.config import Connection
from contextforge_iac.utils.client import ContextForgeClient

BASE_URL = "http://contextforge.test"

# collection -> create envelope key (None for flat bodies)
ENVELOPES = {
    "gateways": None,
    "servers": "server",
    "tools": "tool",
    "resources": "resource",
    "prompts": "prompt",
}


class FakeContextForge:
    """
    In-memory stand-in for the ContextForge admin API.

    Behaves like the real service where the reconcilers care:
    - server-assigned IDs, timestamps and is_active
    - enveloped create bodies for servers/tools/resources/prompts
    - auth_value accepted but never returned
    - 404 for unknown IDs, 200 on delete of a known ID
    - include_inactive=false hides inactive entities
    - GET /resources/{id}/info for single resources
    - /roots keyed by URI, no item GET
    """

    def __init__(self) -> None:
        self.entities: dict[str, dict[str, dict[str, Any]]] = {name: {} for name in ENVELOPES}
        self.roots: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self._ids = count(1)

    # -------------------------------------------------------------------------
    # helpers for tests
    # -------------------------------------------------------------------------

    def seed(self, collection: str, entity: dict[str, Any]) -> dict[str, Any]:
        """Store an entity directly, as if some other client created it."""
        self.entities[collection][entity["id"]] = entity
        return entity

    def bodies(self, method: str) -> list[Any]:
        """Decoded JSON bodies of every request with this method."""
        return [json.loads(r.content) for r in self.requests if r.method == method and r.content]

    # -------------------------------------------------------------------------
    # dispatch
    # -------------------------------------------------------------------------

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        raw_path = request.url.raw_path.split(b"?", 1)[0].decode("ascii")
        segments = [unquote(s) for s in raw_path.strip("/").split("/")]
        method = request.method

        if segments == ["health"]:
            return httpx.Response(200, json={"status": "healthy"})

        collection, rest = segments[0], segments[1:]
        if collection == "roots":
            return self._roots(method, rest, request)
        if collection not in self.entities:
            return httpx.Response(404, json={"detail": "Not Found"})

        if not rest:
            if method == "GET":
                return self._list(collection, request)
            if method == "POST":
                return self._create(collection, request)
        else:
            identity = rest[0]
            if method == "GET" and (collection != "resources" or rest[1:] == ["info"]):
                return self._get(collection, identity)
            if method == "PUT":
                return self._update(collection, identity, request)
            if method == "DELETE":
                return self._delete(collection, identity)

        return httpx.Response(405, json={"detail": "Method Not Allowed"})

    def _list(self, collection: str, request: httpx.Request) -> httpx.Response:
        include_inactive = request.url.params.get("include_inactive") == "true"
        items = [
            e for e in self.entities[collection].values() if include_inactive or e.get("is_active", True)
        ]
        return httpx.Response(200, json=items)

    def _create(self, collection: str, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        envelope = ENVELOPES[collection]
        if envelope:
            fields = dict(body[envelope])
            for sibling in ("visibility", "team_id"):
                if body.get(sibling) is not None:
                    fields[sibling] = body[sibling]
        else:
            fields = dict(body)

        fields.pop("auth_value", None)
        entity = {
            "is_active": True,
            **fields,
            "id": f"{envelope or 'gateway'}-{next(self._ids)}",
            "created_at": "2025-01-01T00:00:00Z",
            "updated_at": "2025-01-01T00:00:00Z",
        }
        if envelope:
            entity.setdefault("visibility", "public")
        self.entities[collection][entity["id"]] = entity
        return httpx.Response(201, json=entity)

    def _get(self, collection: str, identity: str) -> httpx.Response:
        entity = self.entities[collection].get(identity)
        if entity is None:
            return httpx.Response(404, json={"detail": f"{identity} not found"})
        return httpx.Response(200, json=entity)

    def _update(self, collection: str, identity: str, request: httpx.Request) -> httpx.Response:
        entity = self.entities[collection].get(identity)
        if entity is None:
            return httpx.Response(404, json={"detail": f"{identity} not found"})
        changes = json.loads(request.content)
        changes.pop("auth_value", None)
        entity.update(changes, updated_at="2025-01-02T00:00:00Z")
        return httpx.Response(200, json=entity)

    def _delete(self, collection: str, identity: str) -> httpx.Response:
        if self.entities[collection].pop(identity, None) is None:
            return httpx.Response(404, json={"detail": f"{identity} not found"})
        return httpx.Response(200, json={"status": "success"})

    def _roots(self, method: str, rest: list[str], request: httpx.Request) -> httpx.Response:
        if not rest and method == "GET":
            return httpx.Response(200, json=list(self.roots.values()))
        if not rest and method == "POST":
            root = json.loads(request.content)
            self.roots[root["uri"]] = root
            return httpx.Response(200, json=root)
        if rest and method == "DELETE":
            if self.roots.pop(rest[0], None) is None:
                return httpx.Response(404, json={"detail": "Root not found"})
            return httpx.Response(200, json={"status": "success"})
        return httpx.Response(405, json={"detail": "Method Not Allowed"})


@pytest.fixture
def connection() -> Connection:
    """Connection to the fake gateway with a bearer token."""
    return Connection(endpoint=BASE_URL, token=SecretStr("test-token"))


@pytest.fixture
def anonymous_connection() -> Connection:
    """Connection to the fake gateway without a token."""
    return Connection(endpoint=BASE_URL)


@pytest.fixture
def fake_api() -> Iterator[FakeContextForge]:
    """Mount a fresh FakeContextForge for every request to BASE_URL."""
    api = FakeContextForge()
    with respx.mock(base_url=BASE_URL, assert_all_called=False) as router:
        router.route().mock(side_effect=api.handle)
        yield api


@pytest.fixture
async def client(connection: Connection) -> AsyncIterator[ContextForgeClient]:
    """Open ContextForge client; pair with fake_api or respx routes."""
    async with ContextForgeClient(connection) as c:
        yield c


# Integration test fixtures


@pytest.fixture
def contextforge_endpoint() -> str | None:
    """Get live gateway endpoint from environment."""
    return os.environ.get("CONTEXTFORGE_TEST_ENDPOINT")


@pytest.fixture
def contextforge_token() -> str:
    """Get live gateway token from environment."""
    return os.environ.get("CONTEXTFORGE_TEST_TOKEN", "")


@pytest.fixture
async def live_client(
    contextforge_endpoint: str | None,
    contextforge_token: str,
) -> AsyncIterator[ContextForgeClient]:
    """Create a live ContextForge client for integration tests."""
    if not contextforge_endpoint:
        pytest.skip("CONTEXTFORGE_TEST_ENDPOINT not set")

    connection = Connection(
        endpoint=contextforge_endpoint,
        token=SecretStr(contextforge_token),
    )
    async with ContextForgeClient(connection) as c:
        yield c
