"""Routes for game lookups, searches and catalog writes."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, HTTPException, Query, Response, status

from games_catalog.models.enriched import EnrichedGame
from games_catalog.models.game import Game, GameCreate
from games_catalog.models.search import TopSearchedGame
from games_catalog.services.catalog_service import CatalogServiceDependency

router = APIRouter(prefix="/api/games", tags=["games"])


@router.get(
    "/random",
    response_model=EnrichedGame,
    response_model_exclude_none=True,
    summary="Return a random game in the lookup shape",
)
async def random_game(service: CatalogServiceDependency) -> EnrichedGame:
    game = await service.random_game()
    if game is None:
        raise HTTPException(status_code=404, detail="Catalog is empty")
    return game


@router.get(
    "/ids",
    response_model=list[EnrichedGame],
    response_model_exclude_none=True,
    summary="Fetch several games; repeat gameIds once per id",
)
async def games_by_ids(
    service: CatalogServiceDependency,
    game_ids: Annotated[list[UUID] | None, Query(alias="gameIds")] = None,
) -> list[EnrichedGame]:
    games = await service.get_games(game_ids or [])
    if not games:
        raise HTTPException(status_code=404, detail="No games found")
    return games


@router.get(
    "/search",
    response_model=list[EnrichedGame],
    response_model_exclude_none=True,
    summary="Fuzzy search by name with an optional genre filter",
)
async def search_games(
    service: CatalogServiceDependency,
    background_tasks: BackgroundTasks,
    name: str | None = None,
    genre: int | None = None,
    size: Annotated[int | None, Query(ge=1)] = None,
) -> list[EnrichedGame]:
    return await service.search(name, genre, size, background=background_tasks)


@router.get(
    "/suggest",
    response_model=list[EnrichedGame],
    response_model_exclude_none=True,
    summary="Random suggestions from a genre",
)
async def suggest_games(
    service: CatalogServiceDependency,
    genre: int,
) -> list[EnrichedGame]:
    return await service.suggest(genre)


@router.get(
    "/top-searched",
    response_model=list[TopSearchedGame],
    response_model_exclude_none=True,
    summary="Most frequently returned games in searches",
)
async def top_searched(
    service: CatalogServiceDependency,
    size: Annotated[int | None, Query(ge=1)] = None,
) -> list[TopSearchedGame]:
    return await service.top_searched(size)


@router.get(
    "",
    response_model=list[EnrichedGame],
    response_model_exclude_none=True,
    summary="List the whole catalog",
)
async def list_games(service: CatalogServiceDependency) -> list[EnrichedGame]:
    return await service.list_games()


@router.get(
    "/{game_id}",
    response_model=EnrichedGame,
    response_model_exclude_none=True,
    summary="Fetch one game with its active promotion",
)
async def get_game(game_id: UUID, service: CatalogServiceDependency) -> EnrichedGame:
    game = await service.get_game(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="Unknown game id")
    return game


@router.post(
    "",
    response_model=Game,
    status_code=status.HTTP_201_CREATED,
    summary="Register a game",
)
async def create_game(
    payload: GameCreate,
    service: CatalogServiceDependency,
    response: Response,
) -> Game:
    game = await service.create_game(payload)
    response.headers["Location"] = f"/api/games/{game.id}"
    return game


@router.delete(
    "/{game_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a game",
)
async def delete_game(game_id: UUID, service: CatalogServiceDependency) -> Response:
    if not await service.delete_game(game_id):
        raise HTTPException(status_code=404, detail="Unknown game id")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
