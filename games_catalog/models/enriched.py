"""Uniform output shape shared by lookups, catalog scans and searches."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from games_catalog.models.game import CamelModel, Money


class PromotionView(CamelModel):
    """Projection of the active promotion attached to an enriched game."""

    id: UUID
    discount_percentage: Money
    start_date: datetime
    end_date: datetime
    is_active: bool
    discounted_price: Money | None = None


class EnrichedGame(CamelModel):
    """A game merged with its active promotion and, for search hits, a score.

    ``promotion`` and ``score`` are left as ``None`` when absent and dropped
    from the serialized output.
    """

    id: UUID
    title: str | None = None
    description: str | None = None
    price: Money | None = None
    genre: int | None = None
    promotion: PromotionView | None = None
    score: float | None = None

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
