"""Operational routes."""

from __future__ import annotations

from fastapi import APIRouter

from games_catalog.models.search import ReindexSummary
from games_catalog.services.catalog_service import CatalogServiceDependency

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post(
    "/reindex-elastic",
    response_model=ReindexSummary,
    summary="Rebuild the search index from the catalog store",
)
async def reindex_elastic(service: CatalogServiceDependency) -> ReindexSummary:
    return await service.reindex()
