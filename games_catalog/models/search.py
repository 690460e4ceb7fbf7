"""Models describing documents and hits exchanged with the search index."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from games_catalog.models.enriched import EnrichedGame
from games_catalog.models.game import CamelModel, Game


class SearchDocument(BaseModel):
    """Denormalized projection of a game stored in the search index.

    Every field except ``id`` may be missing when the backend returned a
    value that could not be decoded.
    """

    id: UUID
    title: str | None = None
    description: str | None = None
    price: Decimal | None = None
    genre: int | None = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_game(cls, game: Game) -> SearchDocument:
        return cls(
            id=game.id,
            title=game.title,
            description=game.description,
            price=game.price,
            genre=game.genre,
        )

    def to_source(self) -> dict:
        """Return the flat JSON body indexed under ``_doc/{id}``."""
        return {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "price": float(self.price) if self.price is not None else None,
            "genre": self.genre,
        }


class SearchHit(SearchDocument):
    """A document returned by a search, with its relevance score if ranked."""

    score: float | None = None


class TopSearchedGame(CamelModel):
    game_id: UUID
    count: int = Field(..., ge=0)
    game: EnrichedGame


class ReindexSummary(CamelModel):
    reindexed: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
