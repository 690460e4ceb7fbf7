"""Tests for the catalog service orchestration."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from games_catalog.errors import CatalogValidationError, DataAccessError
from games_catalog.models.game import GameCreate
from games_catalog.models.search import SearchHit
from games_catalog.services.catalog_service import CatalogService, get_catalog_service
from games_catalog.services.queue.index_queue import IndexQueue
from games_catalog.services.search.elastic_gateway import SearchIndexGateway
from games_catalog.services.storage.catalog_store import CatalogStore
from games_catalog.services.storage.genre_store import GenreStore
from games_catalog.services.storage.promotion_store import PromotionStore


def _service(session, gateway=None, queue=None):
    return CatalogService(
        games=CatalogStore(session),
        genres=GenreStore(session),
        promotions=PromotionStore(session),
        gateway=gateway or MagicMock(spec=SearchIndexGateway),
        queue=queue,
    )


def _payload(title="Hades"):
    return GameCreate(title=title, description="", price=Decimal("24.99"), genre=1)


@pytest.mark.asyncio
async def test_create_game_survives_queue_failure(session):
    queue = MagicMock(spec=IndexQueue)
    queue.enqueue = AsyncMock(side_effect=ConnectionError("redis down"))
    service = _service(session, queue=queue)

    game = await service.create_game(_payload())

    assert game.title == "Hades"
    queue.enqueue.assert_awaited_once()
    assert await service.games.get(game.id) == game


@pytest.mark.asyncio
async def test_search_records_returned_hits(session):
    first, second = uuid4(), uuid4()
    gateway = MagicMock(spec=SearchIndexGateway)
    gateway.search_filtered = AsyncMock(
        return_value=[SearchHit(id=first, score=2.0), SearchHit(id=second, score=1.0)]
    )
    gateway.record_hits = AsyncMock()
    service = _service(session, gateway=gateway)

    results = await service.search("hades", None, size=500)

    gateway.search_filtered.assert_awaited_once_with("hades", None, 100)
    gateway.record_hits.assert_awaited_once_with([first, second])
    assert [result.score for result in results] == [2.0, 1.0]


@pytest.mark.asyncio
async def test_search_without_criteria_does_no_io(session):
    gateway = MagicMock(spec=SearchIndexGateway)
    gateway.search_filtered = AsyncMock()
    service = _service(session, gateway=gateway)

    with pytest.raises(CatalogValidationError):
        await service.search("   ", None)

    gateway.search_filtered.assert_not_awaited()


@pytest.mark.asyncio
async def test_top_searched_skips_games_no_longer_in_store(session):
    service = _service(session)
    kept = await service.create_game(_payload("Kept"))
    service.gateway.top_by_hit_count = AsyncMock(
        return_value=[(uuid4(), 9), (kept.id, 4)]
    )

    top = await service.top_searched(5)

    assert [(entry.game_id, entry.count) for entry in top] == [(kept.id, 4)]
    assert top[0].game.title == "Kept"


@pytest.mark.asyncio
async def test_suggest_uses_configured_size(session):
    gateway = MagicMock(spec=SearchIndexGateway)
    gateway.sample_by_genre = AsyncMock(return_value=[])
    service = _service(session, gateway=gateway)

    assert await service.suggest(3, seed=42) == []
    gateway.sample_by_genre.assert_awaited_once_with(3, 5, 42)


@pytest.mark.asyncio
async def test_store_outage_is_reported_as_503(client):
    from games_catalog.main import app

    service = MagicMock(spec=CatalogService)
    service.get_game = AsyncMock(
        side_effect=DataAccessError("connection refused", operation="get_game")
    )
    app.dependency_overrides[get_catalog_service] = lambda: service
    try:
        response = await client.get(f"/api/games/{uuid4()}")
    finally:
        app.dependency_overrides.pop(get_catalog_service, None)

    assert response.status_code == 503
    assert response.json()["detail"] == {
        "code": "DATA_ACCESS_FAILURE",
        "message": "connection refused",
        "data": {"operation": "get_game"},
    }
