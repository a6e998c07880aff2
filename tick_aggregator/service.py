"""
Aggregator Service - wires the feed, ingestion loop, store and query API.

The ingestion loop runs as one background task next to the HTTP API. When
the loop stops the service shuts down; a feed failure yields exit status 1
so the process supervisor can decide whether to restart it.
"""

import asyncio
import logging
import sys

from .api import QueryAPI, QueryService
from .config import AggregatorConfig
from .exceptions import FeedConnectionError
from .feed import Feed, StreamFeed
from .ingestion import IngestionLoop
from .store import AggregationStore

logger = logging.getLogger(__name__)


class AggregatorService:
    """Owns the store and everything that reads or writes it."""
    
    def __init__(self, config: AggregatorConfig, feed: Feed | None = None):
        self.config = config
        self.store = AggregationStore()
        self.feed = feed if feed is not None else StreamFeed(config.stream)
        self.ingestion = IngestionLoop(self.store, self.feed)
        self.query = QueryService(self.store)
        self.api = QueryAPI(self.query, config.api, self.ingestion)
        self._ingest_task: asyncio.Task | None = None
    
    async def start(self) -> None:
        """Start the query API and spawn the ingestion loop."""
        await self.api.start()
        self._ingest_task = asyncio.create_task(self.ingestion.run(), name="ingestion")
    
    async def wait(self) -> None:
        """Wait for the ingestion loop to stop; re-raises its failure."""
        if self._ingest_task is None:
            raise RuntimeError("Service not started")
        await self._ingest_task
    
    async def stop(self) -> None:
        """Cancel ingestion, close the feed and stop the API."""
        if self._ingest_task and not self._ingest_task.done():
            self._ingest_task.cancel()
            try:
                await self._ingest_task
            except asyncio.CancelledError:
                pass
        
        await self.feed.close()
        await self.api.stop()
        logger.info(f"Aggregator stopped with {len(self.store)} symbols in memory")


async def run_service(config: AggregatorConfig, feed: Feed | None = None) -> int:
    """Run until ingestion stops; returns the process exit status."""
    service = AggregatorService(config, feed)
    await service.start()
    try:
        await service.wait()
    except FeedConnectionError as e:
        logger.error(f"Feed failure, aggregator exiting: {e}")
        return 1
    finally:
        await service.stop()
    return 0


def main():
    """Run the aggregator."""
    config = AggregatorConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s"
    )
    
    try:
        status = asyncio.run(run_service(config))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")
        status = 0
    sys.exit(status)


if __name__ == "__main__":
    main()
