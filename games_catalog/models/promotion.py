"""Promotion domain models and API schemas."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import ConfigDict, computed_field, field_validator

from games_catalog.models.game import CamelModel, Money


def as_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class PromotionCreate(CamelModel):
    """Incoming payload for a time-windowed discount on a single game.

    Range checks live in the catalog service so they can be reported with a
    descriptive reason before any store access.
    """

    game_id: UUID
    discount_percentage: Decimal
    start_date: datetime
    end_date: datetime

    @field_validator("start_date", "end_date")
    @classmethod
    def _normalize_to_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class Promotion(CamelModel):
    id: UUID
    game_id: UUID
    discount_percentage: Money
    start_date: datetime
    end_date: datetime

    model_config = ConfigDict(frozen=True)

    def is_active_at(self, as_of: datetime) -> bool:
        """Return True when ``as_of`` falls inside the window, bounds included."""
        return self.start_date <= as_utc(as_of) <= self.end_date

    @computed_field(alias="isActive")  # type: ignore[prop-decorator]
    @property
    def is_active(self) -> bool:
        return self.is_active_at(datetime.now(UTC))
