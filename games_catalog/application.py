"""FastAPI application factory and bootstrap helpers."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from games_catalog.api.routes import include_api_routes
from games_catalog.config import settings
from games_catalog.errors import (
    CatalogConflictError,
    CatalogError,
    CatalogValidationError,
    DataAccessError,
)
from games_catalog.services.queue.index_queue import close_redis_client
from games_catalog.services.search.elastic_gateway import (
    close_search_gateway,
    get_search_gateway,
)
from games_catalog.services.storage.database import dispose_engine, init_models

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events."""
    if settings.DATABASE_CREATE_ALL:
        await init_models()
        logger.info("Catalog tables ensured")

    # Fails startup when no search backend address can be derived.
    gateway = get_search_gateway()
    await gateway.ensure_games_index()
    await gateway.ensure_hits_index()

    yield

    await close_search_gateway()
    await close_redis_client()
    await dispose_engine()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Games Catalog",
        description="Game search with promotion-aware pricing",
        version="1.0.0",
        lifespan=lifespan,
    )

    _configure_cors(app)
    _register_error_handlers(app)
    include_api_routes(app)

    return app


def _configure_cors(app: FastAPI) -> None:
    """Allow broad access in non-production environments."""

    if settings.is_production:
        return

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _error_response(status_code: int, exc: CatalogError) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": exc.as_dict()})


def _register_error_handlers(app: FastAPI) -> None:
    """Map catalog exceptions onto HTTP status codes."""

    @app.exception_handler(CatalogValidationError)
    async def _validation(_request: Request, exc: CatalogValidationError) -> JSONResponse:
        return _error_response(400, exc)

    @app.exception_handler(CatalogConflictError)
    async def _conflict(_request: Request, exc: CatalogConflictError) -> JSONResponse:
        return _error_response(409, exc)

    @app.exception_handler(DataAccessError)
    async def _data_access(_request: Request, exc: DataAccessError) -> JSONResponse:
        logger.error("Request failed on the catalog store: %s", exc.message)
        return _error_response(503, exc)
