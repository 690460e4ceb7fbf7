"""Resolution of the single active promotion per game."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from games_catalog.models.promotion import Promotion, as_utc

logger = logging.getLogger(__name__)


class ActivePromotionSource(Protocol):
    async def active_for_games(
        self,
        game_ids: Iterable[UUID],
        as_of: datetime,
    ) -> list[Promotion]: ...


def _preference(promotion: Promotion) -> tuple:
    # Highest discount first, then the smallest id for equal discounts.
    return (-promotion.discount_percentage, str(promotion.id))


class PromotionResolver:
    """Selects at most one active promotion per game with a single store query.

    When several promotions of the same game are active at once, the one with
    the highest discount percentage wins; equal percentages are settled by the
    lexicographically smallest promotion id so repeated calls agree.

    Store failures propagate as ``DataAccessError``: a missing promotion would
    silently misprice the game.
    """

    def __init__(self, source: ActivePromotionSource) -> None:
        self._source = source

    async def resolve_active(
        self,
        game_ids: Iterable[UUID],
        as_of: datetime | None = None,
    ) -> dict[UUID, Promotion]:
        ids = set(game_ids)
        if not ids:
            return {}

        instant = as_utc(as_of) if as_of is not None else datetime.now(UTC)
        candidates = await self._source.active_for_games(ids, instant)

        resolved: dict[UUID, Promotion] = {}
        for promotion in sorted(candidates, key=_preference):
            if promotion.game_id not in ids or not promotion.is_active_at(instant):
                continue
            resolved.setdefault(promotion.game_id, promotion)

        logger.debug(
            "Resolved %d active promotions for %d games", len(resolved), len(ids)
        )
        return resolved
