"""Consumer side of the index maintenance stream, including dead-lettering."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import redis.asyncio as redis
from redis.exceptions import ResponseError

from games_catalog.config import settings

logger = logging.getLogger(__name__)

StreamBatch = list[tuple[str, Sequence[tuple[str, dict[str, str]]]]]


class IndexStreamConsumer:
    """Consumer-group reads, acknowledgement and DLQ forwarding for index jobs."""

    def __init__(
        self,
        client: redis.Redis,
        stream_key: str,
        group_name: str,
        dlq_stream_key: str,
    ) -> None:
        self.client = client
        self.stream_key = stream_key
        self.group_name = group_name
        self.dlq_stream_key = dlq_stream_key

    async def ensure_consumer_group(self) -> None:
        try:
            await self.client.xgroup_create(
                name=self.stream_key,
                groupname=self.group_name,
                id="0",
                mkstream=True,
            )
            logger.info("Created index consumer group", extra={"group": self.group_name})
        except ResponseError as exc:
            if "BUSYGROUP" in str(exc):
                return
            raise

    async def read_batch(
        self,
        consumer_name: str,
        count: int = 10,
        block_ms: int = 5000,
    ) -> StreamBatch:
        try:
            return await self._read(consumer_name, count, block_ms)
        except ResponseError as exc:
            if "NOGROUP" not in str(exc):
                raise
            logger.warning("Index consumer group missing, recreating: %s", exc)
            await self.ensure_consumer_group()
            return await self._read(consumer_name, count, block_ms)

    async def _read(self, consumer_name: str, count: int, block_ms: int) -> StreamBatch:
        return await self.client.xreadgroup(
            groupname=self.group_name,
            consumername=consumer_name,
            streams={self.stream_key: ">"},
            count=count,
            block=block_ms,
        )

    async def acknowledge(self, message_ids: list[str]) -> None:
        """Ack and drop processed messages."""
        if not message_ids:
            return
        await self.client.xack(self.stream_key, self.group_name, *message_ids)
        await self.client.xdel(self.stream_key, *message_ids)

    async def dead_letter(self, entry_id: str, payload: str, error: Exception) -> None:
        """Park a job that could not be applied; never raises."""
        try:
            await self.client.xadd(
                self.dlq_stream_key,
                {
                    "payload": payload,
                    "error": str(error),
                    "entry_id": entry_id,
                    "original_stream": self.stream_key,
                },
            )
            logger.warning(
                "Index job sent to DLQ",
                extra={"entry_id": entry_id, "dlq_stream": self.dlq_stream_key},
            )
        except Exception as dlq_error:  # pylint: disable=broad-exception-caught
            logger.error(
                "Failed to send index job to DLQ: %s",
                dlq_error,
                extra={"entry_id": entry_id, "original_error": str(error)},
                exc_info=True,
            )


def create_index_stream_consumer() -> IndexStreamConsumer:
    """Factory function to create a consumer bound to the configured streams."""
    client = redis.from_url(
        settings.REDIS_URL,
        encoding="utf-8",
        decode_responses=True,
        health_check_interval=30,
    )
    return IndexStreamConsumer(
        client,
        settings.INDEX_STREAM_KEY,
        settings.INDEX_CONSUMER_GROUP,
        settings.INDEX_DLQ_STREAM_KEY,
    )
