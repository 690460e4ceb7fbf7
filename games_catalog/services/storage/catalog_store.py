"""Read/write access to game rows in the source-of-truth store."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from games_catalog.models.game import Game, GameCreate
from games_catalog.services.storage.database import translate_errors
from games_catalog.services.storage.tables import GameRow

logger = logging.getLogger(__name__)


class CatalogStore:
    """Point lookup, bulk lookup, full scan and writes for games."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, game_id: UUID) -> Game | None:
        with translate_errors("get_game"):
            row = await self._session.get(GameRow, game_id)
        return Game.model_validate(row) if row else None

    async def get_many(self, game_ids: Iterable[UUID]) -> list[Game]:
        ids = list(dict.fromkeys(game_ids))
        if not ids:
            return []
        with translate_errors("get_games"):
            result = await self._session.execute(
                select(GameRow).where(GameRow.id.in_(ids))
            )
            rows = result.scalars().all()
        return [Game.model_validate(row) for row in rows]

    async def list_all(self) -> list[Game]:
        with translate_errors("list_games"):
            result = await self._session.execute(
                select(GameRow).order_by(GameRow.title, GameRow.id)
            )
            rows = result.scalars().all()
        return [Game.model_validate(row) for row in rows]

    async def create(self, payload: GameCreate) -> Game:
        row = GameRow(
            id=uuid.uuid4(),
            title=payload.title,
            description=payload.description,
            price=payload.price,
            genre=payload.genre,
        )
        with translate_errors("create_game"):
            self._session.add(row)
            await self._session.commit()
        logger.info("Created game %s", row.id, extra={"genre": row.genre})
        return Game.model_validate(row)

    async def delete(self, game_id: UUID) -> bool:
        with translate_errors("delete_game"):
            row = await self._session.get(GameRow, game_id)
            if row is None:
                return False
            await self._session.delete(row)
            await self._session.commit()
        logger.info("Deleted game %s", game_id)
        return True
