"""FastAPI application entry point."""

from games_catalog.application import create_app

app = create_app()

__all__ = ["app"]
