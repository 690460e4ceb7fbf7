"""Pytest configuration and fixtures for the games catalog service."""

import json
from collections import Counter
from datetime import UTC, datetime

import httpx
import pytest
import pytest_asyncio
from fakeredis import aioredis as fakeredis
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from games_catalog.config import settings
from games_catalog.services.queue.index_queue import IndexQueue, get_index_queue
from games_catalog.services.search.elastic_gateway import (
    SearchIndexGateway,
    get_search_gateway,
)
from games_catalog.services.storage.database import (
    create_session_factory,
    get_session,
    init_models,
)

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "asyncio: marks tests as async tests")


class FakeElastic:
    """Tiny in-memory stand-in for the Elasticsearch REST API.

    Understands just enough of the query DSL sent by the gateway to make
    end-to-end tests meaningful, and records every request it receives.
    """

    def __init__(self):
        self.indices: dict[str, dict] = {}
        self.documents: dict[str, dict[str, dict]] = {}
        self.requests: list[httpx.Request] = []
        self.stubs: dict[tuple[str, str], httpx.Response] = {}
        self.fail_with: int | None = None

    def stub(self, method: str, path: str, response: httpx.Response) -> None:
        self.stubs[(method, path)] = response

    def requests_to(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"error": "unavailable"})

        stubbed = self.stubs.get((request.method, request.url.path))
        if stubbed is not None:
            return stubbed

        parts = [part for part in request.url.path.split("/") if part]
        if not parts:
            return httpx.Response(200, json={"tagline": "You Know, for Search"})

        index = parts[0]
        if len(parts) == 1:
            return self._index_lifecycle(request, index)
        if parts[1] == "_doc" and len(parts) == 3:
            return self._document(request, index, parts[2])
        if parts[1] == "_bulk":
            return self._bulk(request, index)
        if parts[1] == "_search":
            return self._search(request, index)
        return httpx.Response(400, json={"error": "unsupported"})

    def _index_lifecycle(self, request, index):
        if request.method == "HEAD":
            return httpx.Response(200 if index in self.indices else 404)
        if index in self.indices:
            return httpx.Response(
                400,
                json={"error": {"type": "resource_already_exists_exception"}},
            )
        self.indices[index] = json.loads(request.content)
        self.documents.setdefault(index, {})
        return httpx.Response(200, json={"acknowledged": True})

    def _document(self, request, index, doc_id):
        docs = self.documents.setdefault(index, {})
        if request.method == "PUT":
            created = doc_id not in docs
            docs[doc_id] = json.loads(request.content)
            return httpx.Response(
                201 if created else 200,
                json={"result": "created" if created else "updated"},
            )
        if docs.pop(doc_id, None) is None:
            return httpx.Response(404, json={"result": "not_found"})
        return httpx.Response(200, json={"result": "deleted"})

    def _bulk(self, request, index):
        docs = self.documents.setdefault(index, {})
        lines = request.content.decode("utf-8").splitlines()
        for line in lines[1::2]:
            docs[str(len(docs))] = json.loads(line)
        return httpx.Response(200, json={"errors": False, "items": []})

    def _search(self, request, index):
        if index not in self.documents:
            return httpx.Response(
                404, json={"error": {"type": "index_not_found_exception"}}
            )
        body = json.loads(request.content)
        sources = list(self.documents[index].values())

        if "aggs" in body:
            counts = Counter(source["gameId"] for source in sources)
            size = body["aggs"]["top"]["terms"]["size"]
            buckets = [
                {"key": key, "doc_count": count}
                for key, count in counts.most_common(size)
            ]
            return httpx.Response(
                200,
                json={"hits": {"hits": []}, "aggregations": {"top": {"buckets": buckets}}},
            )

        matched = [s for s in sources if self._matches(s, body["query"])]
        hits = [
            {"_index": index, "_id": s["id"], "_score": 1.0, "_source": s}
            for s in matched[: body["size"]]
        ]
        return httpx.Response(200, json={"hits": {"total": len(matched), "hits": hits}})

    def _matches(self, source, query) -> bool:
        if "bool" in query:
            clauses = query["bool"].get("must", []) + query["bool"].get("filter", [])
            return all(self._matches(source, clause) for clause in clauses)
        if "multi_match" in query:
            text = query["multi_match"]["query"].lower()
            haystack = f"{source.get('title') or ''} {source.get('description') or ''}"
            return any(token in haystack.lower() for token in text.split())
        if "term" in query:
            return source.get("genre") == query["term"]["genre"]
        if "function_score" in query:
            return self._matches(source, query["function_score"]["query"])
        return True


@pytest.fixture()
def fixed_now():
    """Instant returned by the gateway clock in tests."""
    return FIXED_NOW


@pytest.fixture()
def fake_elastic():
    """Provide an empty fake search backend for each test."""
    return FakeElastic()


@pytest_asyncio.fixture()
async def gateway_factory(fake_elastic):
    """Build gateways bound to the fake backend, optionally with policy overrides."""
    created: list[SearchIndexGateway] = []

    def _build(policies=None, handler=None):
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(handler or fake_elastic.handle),
            base_url="http://elastic.test",
        )
        gateway = SearchIndexGateway(client, policies=policies, clock=lambda: FIXED_NOW)
        created.append(gateway)
        return gateway

    yield _build

    for gateway in created:
        await gateway.aclose()


@pytest.fixture()
def gateway(gateway_factory):
    return gateway_factory()


@pytest_asyncio.fixture()
async def redis_client():
    """Provide a fake Redis client for each test."""
    client = fakeredis.FakeRedis(decode_responses=True)
    try:
        yield client
    finally:
        await client.flushdb()
        await client.aclose()


@pytest.fixture()
def index_queue(redis_client):
    return IndexQueue(redis_client, settings.INDEX_STREAM_KEY)


@pytest_asyncio.fixture()
async def session_factory():
    """In-memory SQLite catalog shared by every session of a test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_models(engine)
    try:
        yield create_session_factory(engine)
    finally:
        await engine.dispose()


@pytest_asyncio.fixture()
async def session(session_factory):
    async with session_factory() as db_session:
        yield db_session


@pytest_asyncio.fixture()
async def client(session_factory, gateway, index_queue):
    """Return an HTTPX async client pointing at the FastAPI app."""
    from games_catalog.main import app

    async def _session_override():
        async with session_factory() as db_session:
            yield db_session

    app.dependency_overrides[get_session] = _session_override
    app.dependency_overrides[get_search_gateway] = lambda: gateway
    app.dependency_overrides[get_index_queue] = lambda: index_queue
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://testserver",
        ) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.pop(get_session, None)
        app.dependency_overrides.pop(get_search_gateway, None)
        app.dependency_overrides.pop(get_index_queue, None)
