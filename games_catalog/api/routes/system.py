"""System-level routes such as health checks."""

from __future__ import annotations

from fastapi import APIRouter

from games_catalog.config import settings
from games_catalog.services.search.elastic_gateway import GatewayDependency

router = APIRouter(tags=["system"])


@router.get("/health")
@router.get("/api/games/health", include_in_schema=False)
async def health_check(gateway: GatewayDependency) -> dict[str, str]:
    """Health check reporting search backend reachability.

    The service stays healthy without the search backend; only search
    features degrade.
    """

    elastic_status = "connected" if await gateway.ping() else "disconnected"
    return {
        "status": "healthy",
        "elastic": elastic_status,
        "environment": settings.ENVIRONMENT,
    }
