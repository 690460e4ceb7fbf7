"""API route registration."""

from fastapi import FastAPI

from games_catalog.api.routes import admin, games, genres, promotions, system


def include_api_routes(app: FastAPI) -> None:
    """Attach all API routers to the application."""

    app.include_router(system.router)
    app.include_router(games.router)
    app.include_router(genres.router)
    app.include_router(promotions.router)
    app.include_router(admin.router)
