"""Per-request orchestration of catalog reads, searches and writes."""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import BackgroundTasks, Depends

from games_catalog.config import settings
from games_catalog.errors import CatalogConflictError, CatalogValidationError
from games_catalog.models.enriched import EnrichedGame
from games_catalog.models.game import Game, GameCreate, Genre, GenreCreate
from games_catalog.models.index_job import IndexJob
from games_catalog.models.promotion import Promotion, PromotionCreate
from games_catalog.models.search import ReindexSummary, TopSearchedGame
from games_catalog.services.enrichment import EnrichmentPipeline
from games_catalog.services.pricing.discount import validate_promotion
from games_catalog.services.pricing.promotion_resolver import PromotionResolver
from games_catalog.services.queue.index_queue import (
    IndexQueue,
    IndexQueueDependency,
    delete_job,
    upsert_job,
)
from games_catalog.services.search.elastic_gateway import (
    GatewayDependency,
    SearchIndexGateway,
)
from games_catalog.services.storage.catalog_store import CatalogStore
from games_catalog.services.storage.database import SessionDependency
from games_catalog.services.storage.genre_store import GenreStore
from games_catalog.services.storage.promotion_store import PromotionStore

logger = logging.getLogger(__name__)


class CatalogService:
    """Combines the source-of-truth stores, the search index and enrichment.

    Reads that only need the stores stay correct when the search backend is
    down. Writes hand index maintenance to the queue and never wait on it.
    """

    def __init__(
        self,
        *,
        games: CatalogStore,
        genres: GenreStore,
        promotions: PromotionStore,
        gateway: SearchIndexGateway,
        queue: IndexQueue | None = None,
    ) -> None:
        self.games = games
        self.genres = genres
        self.promotions = promotions
        self.gateway = gateway
        self.queue = queue
        self.pipeline = EnrichmentPipeline(PromotionResolver(promotions))

    # ---------- Retrieval ----------

    async def get_game(
        self, game_id: UUID, as_of: datetime | None = None
    ) -> EnrichedGame | None:
        game = await self.games.get(game_id)
        if game is None:
            return None
        enriched = await self.pipeline.enrich([game], as_of)
        return enriched[0]

    async def get_games(
        self, game_ids: Sequence[UUID], as_of: datetime | None = None
    ) -> list[EnrichedGame]:
        """Enrich the requested games in request order; unknown ids are skipped."""
        if not game_ids:
            raise CatalogValidationError("MISSING_GAME_IDS")
        requested = list(dict.fromkeys(game_ids))
        found = {game.id: game for game in await self.games.get_many(requested)}
        ordered = [found[game_id] for game_id in requested if game_id in found]
        return await self.pipeline.enrich(ordered, as_of)

    async def list_games(self, as_of: datetime | None = None) -> list[EnrichedGame]:
        return await self.pipeline.enrich(await self.games.list_all(), as_of)

    async def random_game(self, rng: random.Random | None = None) -> EnrichedGame | None:
        games = await self.games.list_all()
        if not games:
            return None
        chosen = (rng or random).choice(games)
        enriched = await self.pipeline.enrich([chosen])
        return enriched[0]

    async def search(
        self,
        name: str | None,
        genre: int | None,
        size: int | None = None,
        background: BackgroundTasks | None = None,
    ) -> list[EnrichedGame]:
        """Fuzzy name search with an optional genre filter.

        Returned hits are recorded for analytics without delaying the
        response when ``background`` is given.
        """
        if (not name or not name.strip()) and genre is None:
            raise CatalogValidationError("MISSING_SEARCH_PARAMETER")

        hits = await self.gateway.search_filtered(
            name, genre, settings.clamp_search_size(size)
        )
        hit_ids = [hit.id for hit in hits]
        if background is not None:
            background.add_task(self.gateway.record_hits, hit_ids)
        else:
            await self.gateway.record_hits(hit_ids)
        return await self.pipeline.enrich(hits)

    async def suggest(
        self,
        genre: int,
        size: int | None = None,
        seed: int | None = None,
    ) -> list[EnrichedGame]:
        hits = await self.gateway.sample_by_genre(
            genre, size or settings.SUGGEST_SIZE, seed
        )
        return await self.pipeline.enrich(hits)

    async def top_searched(self, size: int | None = None) -> list[TopSearchedGame]:
        counts = await self.gateway.top_by_hit_count(settings.clamp_search_size(size))
        if not counts:
            return []
        found = {
            game.id: game
            for game in await self.games.get_many(game_id for game_id, _ in counts)
        }
        ranked = [(game_id, count) for game_id, count in counts if game_id in found]
        enriched = await self.pipeline.enrich([found[game_id] for game_id, _ in ranked])
        return [
            TopSearchedGame(game_id=game_id, count=count, game=game)
            for (game_id, count), game in zip(ranked, enriched)
        ]

    # ---------- Catalog writes ----------

    async def _enqueue(self, jobs: list[IndexJob]) -> None:
        if self.queue is None:
            return
        try:
            await self.queue.enqueue(jobs)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.warning(
                "Failed to enqueue index jobs for %s, but the write continues: %s",
                [str(job.game_id) for job in jobs],
                exc,
            )

    async def create_game(self, payload: GameCreate) -> Game:
        game = await self.games.create(payload)
        await self._enqueue([upsert_job(game)])
        return game

    async def delete_game(self, game_id: UUID) -> bool:
        deleted = await self.games.delete(game_id)
        if deleted:
            await self._enqueue([delete_job(game_id)])
        return deleted

    async def reindex(self) -> ReindexSummary:
        """Rebuild the games index from a full catalog scan."""
        games = await self.games.list_all()
        if not games:
            return ReindexSummary(reindexed=0, total=0)
        reindexed = await self.gateway.reindex(games)
        logger.info("Reindexed %d of %d games", reindexed, len(games))
        return ReindexSummary(reindexed=reindexed, total=len(games))

    # ---------- Genres ----------

    async def create_genre(self, payload: GenreCreate) -> Genre:
        name = payload.name.strip() if payload.name else ""
        if payload.id <= 0 or not name:
            raise CatalogValidationError("INVALID_GENRE", genre_id=payload.id)
        if await self.genres.get(payload.id) is not None:
            raise CatalogConflictError("GENRE_EXISTS", genre_id=payload.id)
        return await self.genres.create(GenreCreate(id=payload.id, name=name))

    async def get_genre(self, genre_id: int) -> Genre | None:
        return await self.genres.get(genre_id)

    async def list_genres(self) -> list[Genre]:
        return await self.genres.list_all()

    async def delete_genre(self, genre_id: int) -> bool:
        return await self.genres.delete(genre_id)

    # ---------- Promotions ----------

    async def create_promotion(self, payload: PromotionCreate) -> Promotion:
        return await self.promotions.create(validate_promotion(payload))

    async def get_promotion(self, promotion_id: UUID) -> Promotion | None:
        return await self.promotions.get(promotion_id)

    async def list_promotions(self) -> list[Promotion]:
        return await self.promotions.list_all()

    async def delete_promotion(self, promotion_id: UUID) -> bool:
        return await self.promotions.delete(promotion_id)


def get_catalog_service(
    session: SessionDependency,
    gateway: GatewayDependency,
    queue: IndexQueueDependency,
) -> CatalogService:
    """FastAPI dependency building a service bound to the request's session."""
    return CatalogService(
        games=CatalogStore(session),
        genres=GenreStore(session),
        promotions=PromotionStore(session),
        gateway=gateway,
        queue=queue,
    )


CatalogServiceDependency = Annotated[CatalogService, Depends(get_catalog_service)]
