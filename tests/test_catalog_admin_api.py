"""Tests for genre, promotion and reindex endpoints."""

from uuid import uuid4

import pytest


@pytest.mark.asyncio
async def test_genre_crud(client):
    created = await client.post("/api/genres", json={"id": 3, "name": " Puzzle "})
    duplicate = await client.post("/api/genres", json={"id": 3, "name": "Other"})

    assert created.status_code == 201
    assert created.json() == {"id": 3, "name": "Puzzle"}
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"]["code"] == "GENRE_EXISTS"
    assert (await client.get("/api/genres/3")).json()["name"] == "Puzzle"
    assert [genre["id"] for genre in (await client.get("/api/genres")).json()] == [3]
    assert (await client.delete("/api/genres/3")).status_code == 204
    assert (await client.get("/api/genres/3")).status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{"id": 0, "name": "RPG"}, {"id": 1, "name": "  "}])
async def test_invalid_genre_is_rejected(client, payload):
    response = await client.post("/api/genres", json=payload)

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "INVALID_GENRE"


@pytest.mark.asyncio
async def test_promotion_crud(client):
    game_id = str(uuid4())
    created = await client.post(
        "/api/promotions",
        json={
            "gameId": game_id,
            "discountPercentage": 30,
            "startDate": "2000-01-01T00:00:00Z",
            "endDate": "2999-01-01T00:00:00Z",
        },
    )

    assert created.status_code == 201
    promotion = created.json()
    assert promotion["gameId"] == game_id
    assert promotion["isActive"] is True

    fetched = await client.get(f"/api/promotions/{promotion['id']}")
    assert fetched.json()["discountPercentage"] == 30.0
    assert len((await client.get("/api/promotions")).json()) == 1
    assert (await client.delete(f"/api/promotions/{promotion['id']}")).status_code == 204
    assert (await client.get(f"/api/promotions/{promotion['id']}")).status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("discount", "start", "end", "code"),
    [
        (0, "2024-01-01T00:00:00Z", "2024-02-01T00:00:00Z", "INVALID_DISCOUNT"),
        (100, "2024-01-01T00:00:00Z", "2024-02-01T00:00:00Z", "INVALID_DISCOUNT"),
        (10, "2024-02-01T00:00:00Z", "2024-01-01T00:00:00Z", "INVALID_WINDOW"),
    ],
)
async def test_invalid_promotion_is_rejected(client, discount, start, end, code):
    response = await client.post(
        "/api/promotions",
        json={
            "gameId": str(uuid4()),
            "discountPercentage": discount,
            "startDate": start,
            "endDate": end,
        },
    )

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == code


@pytest.mark.asyncio
async def test_reindex_of_empty_catalog(client, fake_elastic):
    response = await client.post("/api/admin/reindex-elastic")

    assert response.status_code == 200
    assert response.json() == {"reindexed": 0, "total": 0}
    assert fake_elastic.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize("discount", ["99.999", "0.001"])
async def test_discount_rounding_to_the_edge_is_rejected(client, discount):
    response = await client.post(
        "/api/promotions",
        json={
            "gameId": str(uuid4()),
            "discountPercentage": discount,
            "startDate": "2000-01-01T00:00:00Z",
            "endDate": "2999-01-01T00:00:00Z",
        },
    )

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "INVALID_DISCOUNT"
    assert (await client.get("/api/promotions")).json() == []


@pytest.mark.asyncio
async def test_created_promotion_reports_the_stored_discount(client):
    created = await client.post(
        "/api/promotions",
        json={
            "gameId": str(uuid4()),
            "discountPercentage": "99.994",
            "startDate": "2000-01-01T00:00:00Z",
            "endDate": "2999-01-01T00:00:00Z",
        },
    )

    assert created.status_code == 201
    assert created.json()["discountPercentage"] == 99.99
    fetched = await client.get(f"/api/promotions/{created.json()['id']}")
    assert fetched.json()["discountPercentage"] == 99.99


@pytest.mark.asyncio
async def test_overlong_genre_name_is_rejected(client):
    response = await client.post("/api/genres", json={"id": 9, "name": "x" * 101})

    assert response.status_code == 422
