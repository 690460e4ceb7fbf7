"""Game and genre domain models and API schemas."""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

# Upper bound of the Numeric(10, 2) price column.
MAX_PRICE = Decimal("1e8")

# Decimals travel as JSON numbers, not strings.
Money = Annotated[
    Decimal,
    PlainSerializer(lambda value: float(value), return_type=float, when_used="json"),
]


class CamelModel(BaseModel):
    """Base model emitting camelCase field names on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class GameCreate(CamelModel):
    """Incoming payload used to register a game in the catalog."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    price: Money = Field(..., ge=0, lt=MAX_PRICE, decimal_places=2)
    genre: int = Field(..., description="Genre code; unknown codes are passed through")


class Game(GameCreate):
    """A catalog row as stored in the source-of-truth store."""

    id: UUID

    model_config = ConfigDict(frozen=True)


class GenreCreate(CamelModel):
    id: int
    name: str = Field(..., max_length=100)


class Genre(GenreCreate):
    model_config = ConfigDict(frozen=True)
