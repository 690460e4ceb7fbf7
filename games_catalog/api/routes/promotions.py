"""Routes for promotion management."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, HTTPException, Response, status

from games_catalog.models.promotion import Promotion, PromotionCreate
from games_catalog.services.catalog_service import CatalogServiceDependency

router = APIRouter(prefix="/api/promotions", tags=["promotions"])


@router.post(
    "",
    response_model=Promotion,
    status_code=status.HTTP_201_CREATED,
    summary="Create a time-windowed discount for one game",
)
async def create_promotion(
    payload: PromotionCreate,
    service: CatalogServiceDependency,
) -> Promotion:
    return await service.create_promotion(payload)


@router.get("", response_model=list[Promotion])
async def list_promotions(service: CatalogServiceDependency) -> list[Promotion]:
    return await service.list_promotions()


@router.get("/{promotion_id}", response_model=Promotion)
async def get_promotion(
    promotion_id: UUID,
    service: CatalogServiceDependency,
) -> Promotion:
    promotion = await service.get_promotion(promotion_id)
    if promotion is None:
        raise HTTPException(status_code=404, detail="Unknown promotion id")
    return promotion


@router.delete("/{promotion_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_promotion(
    promotion_id: UUID,
    service: CatalogServiceDependency,
) -> Response:
    if not await service.delete_promotion(promotion_id):
        raise HTTPException(status_code=404, detail="Unknown promotion id")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
