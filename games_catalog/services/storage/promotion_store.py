"""Read/write access to time-windowed promotion rows."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from games_catalog.models.promotion import Promotion, PromotionCreate
from games_catalog.services.storage.database import translate_errors
from games_catalog.services.storage.tables import PromotionRow

logger = logging.getLogger(__name__)


class PromotionStore:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, promotion_id: UUID) -> Promotion | None:
        with translate_errors("get_promotion"):
            row = await self._session.get(PromotionRow, promotion_id)
        return Promotion.model_validate(row) if row else None

    async def list_all(self) -> list[Promotion]:
        with translate_errors("list_promotions"):
            result = await self._session.execute(
                select(PromotionRow).order_by(PromotionRow.start_date, PromotionRow.id)
            )
            rows = result.scalars().all()
        return [Promotion.model_validate(row) for row in rows]

    async def active_for_games(
        self,
        game_ids: Iterable[UUID],
        as_of: datetime,
    ) -> list[Promotion]:
        """Return every promotion of the given games whose window contains ``as_of``."""
        ids = list(dict.fromkeys(game_ids))
        if not ids:
            return []
        stmt = select(PromotionRow).where(
            PromotionRow.game_id.in_(ids),
            PromotionRow.start_date <= as_of,
            PromotionRow.end_date >= as_of,
        )
        with translate_errors("active_promotions"):
            result = await self._session.execute(stmt)
            rows = result.scalars().all()
        return [Promotion.model_validate(row) for row in rows]

    async def create(self, payload: PromotionCreate) -> Promotion:
        row = PromotionRow(
            id=uuid.uuid4(),
            game_id=payload.game_id,
            discount_percentage=payload.discount_percentage,
            start_date=payload.start_date,
            end_date=payload.end_date,
        )
        with translate_errors("create_promotion"):
            self._session.add(row)
            await self._session.commit()
        logger.info(
            "Created promotion %s",
            row.id,
            extra={"game_id": str(row.game_id), "discount": str(row.discount_percentage)},
        )
        return Promotion.model_validate(row)

    async def delete(self, promotion_id: UUID) -> bool:
        with translate_errors("delete_promotion"):
            row = await self._session.get(PromotionRow, promotion_id)
            if row is None:
                return False
            await self._session.delete(row)
            await self._session.commit()
        return True
