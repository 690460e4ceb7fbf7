"""Async engine and session factory for the relational catalog store."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterator
from contextlib import contextmanager
from typing import Annotated

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from games_catalog.config import settings
from games_catalog.errors import DataAccessError
from games_catalog.services.storage.tables import Base

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"echo": False}
    return {"echo": False, "pool_size": 20, "max_overflow": 20, "pool_pre_ping": True}


def get_engine() -> AsyncEngine:
    """Return a singleton async engine for the current process."""

    global _engine
    if _engine is None:
        _engine = create_async_engine(
            settings.DATABASE_URL,
            **_engine_options(settings.DATABASE_URL),
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = create_session_factory(get_engine())
    return _session_factory


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=True,
        expire_on_commit=False,
    )


async def init_models(engine: AsyncEngine | None = None) -> None:
    """Create missing tables. Schema migrations are handled outside the service."""
    target = engine or get_engine()
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


async def get_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency yielding one session per request."""

    async with get_session_factory()() as session:
        yield session


SessionDependency = Annotated[AsyncSession, Depends(get_session)]


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Re-raise driver failures as DataAccessError so callers never see them raw."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Catalog store %s failed: %s", operation, exc)
        raise DataAccessError(str(exc), operation=operation) from exc
