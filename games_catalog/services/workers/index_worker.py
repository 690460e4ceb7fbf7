"""Worker applying queued index maintenance jobs to the search backend."""

from __future__ import annotations

import asyncio
import logging
import os
import socket
import uuid

from games_catalog.config import settings
from games_catalog.models.index_job import IndexJob
from games_catalog.services.queue.index_stream import (
    IndexStreamConsumer,
    StreamBatch,
    create_index_stream_consumer,
)
from games_catalog.services.search.elastic_gateway import (
    SearchIndexGateway,
    create_search_gateway,
)
from games_catalog.services.search.policy import FailurePolicy, IndexOperation

logger = logging.getLogger(__name__)

# Jobs must fail loudly here so they can be dead-lettered.
WORKER_POLICIES = {
    IndexOperation.UPSERT: FailurePolicy.RAISE,
    IndexOperation.DELETE: FailurePolicy.RAISE,
}


class IndexWorker:
    """Consumes the index stream and mirrors catalog writes into the index."""

    def __init__(
        self,
        *,
        consumer: IndexStreamConsumer,
        gateway: SearchIndexGateway,
        consumer_name: str | None = None,
    ) -> None:
        self.consumer = consumer
        self.gateway = gateway
        self.consumer_name = consumer_name or self._build_consumer_name()
        self.batch_size = settings.BATCH_MAX_MESSAGES
        self.block_ms = settings.BATCH_MAX_WAIT_MS
        self._shutdown_event = asyncio.Event()

    def shutdown(self) -> None:
        """Signal the worker to shut down gracefully."""
        self._shutdown_event.set()

    def is_shutdown_requested(self) -> bool:
        return self._shutdown_event.is_set()

    async def run_forever(self) -> None:
        await self.consumer.ensure_consumer_group()
        await self.gateway.ensure_games_index()

        logger.info(
            "Index worker started",
            extra={
                "stream": self.consumer.stream_key,
                "group": self.consumer.group_name,
                "consumer": self.consumer_name,
            },
        )

        try:
            while not self.is_shutdown_requested():
                try:
                    entries = await self.consumer.read_batch(
                        consumer_name=self.consumer_name,
                        count=self.batch_size,
                        block_ms=self.block_ms,
                    )
                except Exception as exc:  # pylint: disable=broad-exception-caught
                    logger.error("Failed to read index stream: %s", exc, exc_info=True)
                    await asyncio.sleep(1)
                    continue

                if entries:
                    await self._process_entries(entries)
        except asyncio.CancelledError:
            logger.info("Index worker %s cancelled", self.consumer_name)
            raise

    async def _process_entries(self, entries: StreamBatch) -> None:
        ack_ids: list[str] = []

        for _stream, messages in entries:
            for message_id, data in messages:
                payload = data.get("payload")
                if payload is None:
                    logger.warning("Missing payload for entry %s", message_id)
                    ack_ids.append(message_id)
                    continue

                try:
                    job = IndexJob.model_validate_json(payload)
                    await self._handle_job(job)
                except Exception as exc:  # pylint: disable=broad-exception-caught
                    logger.exception("Failed to apply index job %s", message_id)
                    await self.consumer.dead_letter(message_id, payload, exc)
                ack_ids.append(message_id)

        try:
            await self.consumer.acknowledge(ack_ids)
        except Exception as ack_exc:  # pylint: disable=broad-exception-caught
            logger.error("Failed to ack index jobs %s: %s", ack_ids, ack_exc)

    async def _handle_job(self, job: IndexJob) -> None:
        if job.op == "delete":
            await self.gateway.delete(job.game_id)
            logger.info("Removed game %s from the index", job.game_id)
            return

        await self.gateway.upsert(job.document)
        logger.info("Indexed game %s", job.game_id)

    @staticmethod
    def _build_consumer_name() -> str:
        hostname = socket.gethostname()
        pid = os.getpid()
        suffix = uuid.uuid4().hex[:6]
        return f"{hostname}:{pid}:{suffix}"


def create_index_worker() -> IndexWorker:
    """Factory function to create an index worker with all dependencies."""
    return IndexWorker(
        consumer=create_index_stream_consumer(),
        gateway=create_search_gateway(policies=WORKER_POLICIES),
    )


async def run_worker(concurrency: int | None = None) -> None:
    """Run one or more index workers."""
    worker_count = concurrency or max(1, settings.WORKER_CONCURRENCY)
    workers = [create_index_worker() for _ in range(worker_count)]

    tasks = [asyncio.create_task(worker.run_forever()) for worker in workers]
    try:
        await asyncio.gather(*tasks, return_exceptions=True)
    finally:
        for worker in workers:
            await worker.gateway.aclose()


def main() -> None:
    """CLI entry point."""
    try:
        asyncio.run(run_worker())
    except KeyboardInterrupt:
        logger.info("Index worker interrupted, shutting down")


if __name__ == "__main__":
    main()
