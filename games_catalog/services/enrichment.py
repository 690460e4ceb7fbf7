"""Merges catalog rows or search hits with their active promotion."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime

from games_catalog.models.enriched import EnrichedGame, PromotionView
from games_catalog.models.game import Game
from games_catalog.models.promotion import Promotion, as_utc
from games_catalog.models.search import SearchHit
from games_catalog.services.pricing.discount import discounted_price
from games_catalog.services.pricing.promotion_resolver import PromotionResolver

logger = logging.getLogger(__name__)


def build_promotion_view(
    promotion: Promotion,
    item: Game | SearchHit,
    as_of: datetime,
) -> PromotionView:
    price = (
        discounted_price(item.price, promotion.discount_percentage)
        if item.price is not None
        else None
    )
    return PromotionView(
        id=promotion.id,
        discount_percentage=promotion.discount_percentage,
        start_date=promotion.start_date,
        end_date=promotion.end_date,
        is_active=promotion.is_active_at(as_of),
        discounted_price=price,
    )


class EnrichmentPipeline:
    """Produces the uniform result shape for any batch of games or hits.

    Exactly one promotion lookup is issued per batch, whatever its size, and
    the output keeps the input order.
    """

    def __init__(self, resolver: PromotionResolver) -> None:
        self._resolver = resolver

    async def enrich(
        self,
        items: Sequence[Game | SearchHit],
        as_of: datetime | None = None,
    ) -> list[EnrichedGame]:
        ids = {item.id for item in items}
        if not ids:
            return []

        instant = as_utc(as_of) if as_of is not None else datetime.now(UTC)
        promotions = await self._resolver.resolve_active(ids, instant)

        results: list[EnrichedGame] = []
        for item in items:
            promotion = promotions.get(item.id)
            results.append(
                EnrichedGame(
                    id=item.id,
                    title=item.title,
                    description=item.description,
                    price=item.price,
                    genre=item.genre,
                    promotion=(
                        build_promotion_view(promotion, item, instant)
                        if promotion is not None
                        else None
                    ),
                    score=item.score if isinstance(item, SearchHit) else None,
                )
            )
        logger.debug(
            "Enriched %d items with %d promotions", len(results), len(promotions)
        )
        return results
