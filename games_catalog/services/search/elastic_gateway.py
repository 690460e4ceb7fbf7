"""Elasticsearch gateway owning the games and search-hits indices."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import UTC, datetime
from typing import Annotated, Any, TypeVar
from uuid import UUID

import httpx
from fastapi import Depends

from games_catalog.config import settings
from games_catalog.errors import SearchBackendError
from games_catalog.models.game import Game
from games_catalog.models.search import SearchDocument, SearchHit
from games_catalog.services.search import queries
from games_catalog.services.search.decoding import decode_buckets, decode_hits
from games_catalog.services.search.elastic_settings import (
    ElasticSettings,
    load_elastic_settings,
)
from games_catalog.services.search.policy import (
    FailurePolicy,
    IndexOperation,
    resolve_policies,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_ALREADY_EXISTS = "resource_already_exists_exception"
# Placeholder id some producers send instead of omitting the game.
_NIL_UUID = UUID(int=0)


def fresh_seed() -> int:
    """Return a positive 31-bit seed that changes on every call."""
    return time.time_ns() & 0x7FFFFFFF


class SearchIndexGateway:
    """Lifecycle, maintenance and queries against the external search backend.

    Every backend failure is routed through the per-operation policy table
    (see ``policy.py``): maintenance is swallowed, reads degrade to empty
    results, unless an instance is built with ``RAISE`` overrides.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        games_index: str | None = None,
        hits_index: str | None = None,
        policies: Mapping[IndexOperation, FailurePolicy] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._client = client
        self.games_index = games_index or settings.GAMES_INDEX
        self.hits_index = hits_index or settings.SEARCH_HITS_INDEX
        self.policies = resolve_policies(policies)
        self._clock = clock or (lambda: datetime.now(UTC))
        self._known_indices: set[str] = set()

    # ---------- Transport ----------

    async def _request(
        self,
        operation: IndexOperation,
        method: str,
        path: str,
        *,
        allowed: Iterable[int] = (),
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise SearchBackendError(
                f"{method} {path} failed: {exc}",
                operation=operation.value,
            ) from exc

        if response.is_success or response.status_code in tuple(allowed):
            return response
        raise SearchBackendError(
            f"{method} {path} returned {response.status_code}: {response.text[:500]}",
            status_code=response.status_code,
            operation=operation.value,
        )

    def _on_failure(
        self,
        operation: IndexOperation,
        exc: SearchBackendError,
        default: T,
    ) -> T:
        if self.policies[operation] is FailurePolicy.RAISE:
            raise exc
        logger.warning(
            "Search backend %s failed: %s",
            operation.value,
            exc.message,
            extra={"operation": operation.value, "status_code": exc.status_code},
        )
        return default

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            logger.warning("Search backend returned a non-JSON body")
            return None

    # ---------- Index lifecycle ----------

    async def ensure_index(self, name: str, mapping: dict[str, Any]) -> None:
        """Create ``name`` with ``mapping`` unless it already exists."""
        if name in self._known_indices:
            return
        try:
            probe = await self._request(
                IndexOperation.ENSURE_INDEX, "HEAD", f"/{name}", allowed=(404,)
            )
            if probe.is_success:
                self._known_indices.add(name)
                return

            created = await self._request(
                IndexOperation.ENSURE_INDEX,
                "PUT",
                f"/{name}",
                json=queries.index_body(mapping),
                allowed=(400,),
            )
            if created.status_code == 400:
                if _ALREADY_EXISTS not in created.text:
                    raise SearchBackendError(
                        f"PUT /{name} returned 400: {created.text[:500]}",
                        status_code=400,
                        operation=IndexOperation.ENSURE_INDEX.value,
                    )
                # Another caller won the race; the index is usable.
                logger.warning("Search index %s was created concurrently", name)
            else:
                logger.info("Created search index %s", name)
            self._known_indices.add(name)
        except SearchBackendError as exc:
            self._on_failure(IndexOperation.ENSURE_INDEX, exc, None)

    async def ensure_games_index(self) -> None:
        await self.ensure_index(self.games_index, queries.GAMES_MAPPING)

    async def ensure_hits_index(self) -> None:
        await self.ensure_index(self.hits_index, queries.SEARCH_HITS_MAPPING)

    # ---------- Document maintenance ----------

    async def _put_document(self, document: SearchDocument) -> None:
        await self.ensure_games_index()
        await self._request(
            IndexOperation.UPSERT,
            "PUT",
            f"/{self.games_index}/_doc/{document.id}",
            json=document.to_source(),
        )

    async def upsert(self, document: SearchDocument) -> None:
        """Index or replace ``document`` under its id."""
        try:
            await self._put_document(document)
            logger.debug("Indexed game %s", document.id)
        except SearchBackendError as exc:
            self._on_failure(IndexOperation.UPSERT, exc, None)

    async def delete(self, game_id: UUID) -> None:
        """Remove a document; a missing document counts as deleted."""
        try:
            response = await self._request(
                IndexOperation.DELETE,
                "DELETE",
                f"/{self.games_index}/_doc/{game_id}",
                allowed=(404,),
            )
            if response.status_code == 404:
                logger.debug("Game %s was not indexed", game_id)
        except SearchBackendError as exc:
            self._on_failure(IndexOperation.DELETE, exc, None)

    async def reindex(self, games: Iterable[Game]) -> int:
        """Upsert every game and return how many were indexed."""
        indexed = 0
        for game in games:
            try:
                await self._put_document(SearchDocument.from_game(game))
                indexed += 1
            except SearchBackendError as exc:
                self._on_failure(IndexOperation.REINDEX, exc, None)
        return indexed

    # ---------- Queries ----------

    async def _search(
        self,
        operation: IndexOperation,
        body: dict[str, Any],
    ) -> list[SearchHit]:
        try:
            response = await self._request(
                operation,
                "POST",
                f"/{self.games_index}/_search",
                json=body,
            )
        except SearchBackendError as exc:
            return self._on_failure(operation, exc, [])
        return decode_hits(self._json(response))

    async def search_fuzzy(self, text: str | None, size: int = 10) -> list[SearchHit]:
        """Typo-tolerant ranked match over title (boosted) and description."""
        if not text or not text.strip():
            return []
        return await self._search(
            IndexOperation.SEARCH, queries.fuzzy_search(text.strip(), size)
        )

    async def search_filtered(
        self,
        text: str | None,
        genre: int | None,
        size: int = 10,
    ) -> list[SearchHit]:
        """Ranked text match with an optional exact genre filter."""
        cleaned = text.strip() if text else None
        body = queries.filtered_search(cleaned, genre, size)
        if body is None:
            return []
        hits = await self._search(IndexOperation.SEARCH, body)
        if cleaned:
            return hits
        # Genre-only matches are unranked.
        return [hit.model_copy(update={"score": None}) for hit in hits]

    async def sample_by_genre(
        self,
        genre: int,
        size: int = 5,
        seed: int | None = None,
    ) -> list[SearchHit]:
        """Return up to ``size`` pseudo-random documents of ``genre``.

        Pass ``seed`` for a reproducible sample; by default every call reseeds.
        """
        body = queries.random_sample(genre, size, fresh_seed() if seed is None else seed)
        hits = await self._search(IndexOperation.SAMPLE, body)
        return [hit.model_copy(update={"score": None}) for hit in hits]

    # ---------- Analytics ----------

    async def record_hits(self, game_ids: Sequence[UUID]) -> None:
        """Append one search-hit event per id to the analytics index."""
        ids = [game_id for game_id in game_ids if game_id is not None and game_id != _NIL_UUID]
        if not ids:
            return

        await self.ensure_hits_index()
        timestamp = self._clock().isoformat()
        lines: list[str] = []
        for game_id in ids:
            lines.append(json.dumps({"index": {}}))
            lines.append(json.dumps({"gameId": str(game_id), "timestamp": timestamp}))
        body = "\n".join(lines) + "\n"

        try:
            response = await self._request(
                IndexOperation.RECORD_HITS,
                "POST",
                f"/{self.hits_index}/_bulk",
                content=body.encode("utf-8"),
                headers={"Content-Type": "application/x-ndjson"},
            )
        except SearchBackendError as exc:
            self._on_failure(IndexOperation.RECORD_HITS, exc, None)
            return

        payload = self._json(response)
        if isinstance(payload, dict) and payload.get("errors"):
            logger.warning(
                "Some search hits were rejected by the backend",
                extra={"count": len(ids)},
            )

    async def top_by_hit_count(self, size: int = 10) -> list[tuple[UUID, int]]:
        """Return ``(game_id, hits)`` pairs, most searched first."""
        try:
            response = await self._request(
                IndexOperation.TOP_HITS,
                "POST",
                f"/{self.hits_index}/_search",
                json=queries.top_terms(size),
                allowed=(404,),
            )
        except SearchBackendError as exc:
            return self._on_failure(IndexOperation.TOP_HITS, exc, [])
        if response.status_code == 404:
            return []
        return decode_buckets(self._json(response))[:size]

    # ---------- Housekeeping ----------

    async def ping(self) -> bool:
        try:
            response = await self._client.get("/")
        except httpx.HTTPError:
            return False
        return response.is_success

    async def aclose(self) -> None:
        await self._client.aclose()


def create_http_client(elastic: ElasticSettings) -> httpx.AsyncClient:
    """Build the HTTP client; raises ConfigurationError when no address is derivable."""
    headers = {"Accept": "application/json"}
    if elastic.api_key:
        headers["Authorization"] = f"ApiKey {elastic.api_key}"
    return httpx.AsyncClient(
        base_url=elastic.base_url(),
        headers=headers,
        timeout=elastic.timeout_seconds,
    )


def create_search_gateway(
    policies: Mapping[IndexOperation, FailurePolicy] | None = None,
    elastic: ElasticSettings | None = None,
) -> SearchIndexGateway:
    """Factory function to create a gateway from the configured settings."""
    client = create_http_client(elastic or load_elastic_settings())
    return SearchIndexGateway(client, policies=policies)


_gateway: SearchIndexGateway | None = None


def get_search_gateway() -> SearchIndexGateway:
    """FastAPI dependency returning the process-wide gateway."""

    global _gateway
    if _gateway is None:
        _gateway = create_search_gateway()
    return _gateway


async def close_search_gateway() -> None:
    global _gateway
    if _gateway is not None:
        await _gateway.aclose()
    _gateway = None


GatewayDependency = Annotated[SearchIndexGateway, Depends(get_search_gateway)]
