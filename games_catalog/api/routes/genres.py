"""Routes for genre management."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Response, status

from games_catalog.models.game import Genre, GenreCreate
from games_catalog.services.catalog_service import CatalogServiceDependency

router = APIRouter(prefix="/api/genres", tags=["genres"])


@router.post("", response_model=Genre, status_code=status.HTTP_201_CREATED)
async def create_genre(payload: GenreCreate, service: CatalogServiceDependency) -> Genre:
    return await service.create_genre(payload)


@router.get("", response_model=list[Genre])
async def list_genres(service: CatalogServiceDependency) -> list[Genre]:
    return await service.list_genres()


@router.get("/{genre_id}", response_model=Genre)
async def get_genre(genre_id: int, service: CatalogServiceDependency) -> Genre:
    genre = await service.get_genre(genre_id)
    if genre is None:
        raise HTTPException(status_code=404, detail="Unknown genre id")
    return genre


@router.delete("/{genre_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_genre(genre_id: int, service: CatalogServiceDependency) -> Response:
    if not await service.delete_genre(genre_id):
        raise HTTPException(status_code=404, detail="Unknown genre id")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
