"""Tests for the relational catalog store."""

from datetime import UTC, datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from games_catalog.errors import DataAccessError
from games_catalog.models.game import GameCreate, GenreCreate
from games_catalog.models.promotion import PromotionCreate
from games_catalog.services.storage.catalog_store import CatalogStore
from games_catalog.services.storage.database import translate_errors
from games_catalog.services.storage.genre_store import GenreStore
from games_catalog.services.storage.promotion_store import PromotionStore

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


async def _create_game(session, title="Portal 2", price="9.99", genre=1):
    return await CatalogStore(session).create(
        GameCreate(title=title, description="Puzzle", price=Decimal(price), genre=genre)
    )


@pytest.mark.asyncio
async def test_create_and_get_game(session):
    created = await _create_game(session)

    fetched = await CatalogStore(session).get(created.id)

    assert fetched == created
    assert fetched.price == Decimal("9.99")


@pytest.mark.asyncio
async def test_get_unknown_game_returns_none(session):
    assert await CatalogStore(session).get(uuid4()) is None


@pytest.mark.asyncio
async def test_get_many_and_list_all(session):
    b = await _create_game(session, title="Braid")
    a = await _create_game(session, title="Antichamber")
    store = CatalogStore(session)

    many = await store.get_many([b.id, uuid4(), b.id])
    everything = await store.list_all()

    assert [game.id for game in many] == [b.id]
    assert [game.title for game in everything] == ["Antichamber", "Braid"]
    assert await store.get_many([]) == []
    assert a in everything


@pytest.mark.asyncio
async def test_delete_game(session):
    game = await _create_game(session)
    store = CatalogStore(session)

    assert await store.delete(game.id) is True
    assert await store.delete(game.id) is False
    assert await store.get(game.id) is None


@pytest.mark.asyncio
async def test_genres_round_trip(session):
    store = GenreStore(session)

    await store.create(GenreCreate(id=2, name="Strategy"))
    await store.create(GenreCreate(id=1, name="RPG"))

    assert [genre.id for genre in await store.list_all()] == [1, 2]
    assert (await store.get(2)).name == "Strategy"
    assert await store.delete(2) is True
    assert await store.get(2) is None


@pytest.mark.asyncio
async def test_promotion_dates_come_back_in_utc(session):
    plus_two = timezone(timedelta(hours=2))
    start = datetime(2024, 6, 1, 14, 0, tzinfo=plus_two)
    promotion = await PromotionStore(session).create(
        PromotionCreate(
            game_id=uuid4(),
            discount_percentage=Decimal("15"),
            start_date=start,
            end_date=start + timedelta(days=3),
        )
    )

    fetched = await PromotionStore(session).get(promotion.id)

    assert fetched.start_date == NOW
    assert fetched.start_date.utcoffset() == timedelta(0)
    assert fetched.discount_percentage == Decimal("15.00")


@pytest.mark.asyncio
async def test_active_for_games_uses_inclusive_window(session):
    store = PromotionStore(session)
    game_id, other_game = uuid4(), uuid4()

    async def _create(game, start, end):
        return await store.create(
            PromotionCreate(
                game_id=game,
                discount_percentage=Decimal("10"),
                start_date=start,
                end_date=end,
            )
        )

    starts_now = await _create(game_id, NOW, NOW + timedelta(days=1))
    ends_now = await _create(game_id, NOW - timedelta(days=1), NOW)
    await _create(game_id, NOW + timedelta(seconds=1), NOW + timedelta(days=1))
    await _create(game_id, NOW - timedelta(days=2), NOW - timedelta(seconds=1))
    await _create(other_game, NOW - timedelta(days=1), NOW + timedelta(days=1))

    active = await store.active_for_games([game_id], NOW)

    assert {promotion.id for promotion in active} == {starts_now.id, ends_now.id}
    assert await store.active_for_games([], NOW) == []


def test_driver_errors_become_data_access_errors():
    with pytest.raises(DataAccessError) as exc_info:
        with translate_errors("list_games"):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    assert exc_info.value.code == "DATA_ACCESS_FAILURE"
    assert exc_info.value.data == {"operation": "list_games"}
