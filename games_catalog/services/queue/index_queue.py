"""Redis-backed queue carrying index maintenance jobs away from catalog writes."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Annotated
from uuid import UUID

import redis.asyncio as redis
from fastapi import Depends

from games_catalog.config import settings
from games_catalog.models.game import Game
from games_catalog.models.index_job import IndexJob
from games_catalog.models.search import SearchDocument

logger = logging.getLogger(__name__)

_redis_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """Return a singleton Redis client for the current process."""

    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis_client


async def close_redis_client() -> None:
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
    _redis_client = None


def upsert_job(game: Game) -> IndexJob:
    return IndexJob(game_id=game.id, op="upsert", document=SearchDocument.from_game(game))


def delete_job(game_id: UUID) -> IndexJob:
    return IndexJob(game_id=game_id, op="delete")


class IndexQueue:
    """Producer side of the index maintenance stream."""

    def __init__(self, client: redis.Redis, stream_key: str) -> None:
        self._client = client
        self._stream_key = stream_key

    async def enqueue(self, jobs: Sequence[IndexJob]) -> int:
        """Push the provided jobs onto the Redis stream."""

        if not jobs:
            return 0

        for job in jobs:
            await self._client.xadd(
                name=self._stream_key,
                fields={"payload": job.model_dump_json()},
                id="*",
            )

        logger.info("Queued %s index jobs", len(jobs))
        return len(jobs)


def get_index_queue() -> IndexQueue:
    client = get_redis_client()
    return IndexQueue(client, settings.INDEX_STREAM_KEY)


IndexQueueDependency = Annotated[IndexQueue, Depends(get_index_queue)]
