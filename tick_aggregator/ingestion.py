"""
Ingestion Loop - drains a tick feed into the aggregation store.

The loop is a single long-lived subscriber:
- malformed payloads are logged and dropped, the loop keeps going
- a feed failure stops the loop and is re-raised to the caller
- messages are folded in delivery order, with no reordering or deduplication
"""

import asyncio
import enum
import logging

from .exceptions import DecodeError
from .feed import Feed
from .models import Tick
from .store import AggregationStore

logger = logging.getLogger(__name__)


class IngestionState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class IngestionLoop:
    """Feeds decoded ticks from a feed into an AggregationStore."""
    
    def __init__(self, store: AggregationStore, feed: Feed):
        self.store = store
        self.feed = feed
        self.state = IngestionState.IDLE
        self.received_count = 0
        self.recorded_count = 0
        self.dropped_count = 0
        self.last_error: Exception | None = None
    
    @property
    def failed(self) -> bool:
        """True if the loop stopped because the feed failed."""
        return self.state is IngestionState.STOPPED and self.last_error is not None
    
    async def run(self) -> None:
        """Start the feed and process payloads until it ends or fails."""
        if self.state is not IngestionState.IDLE:
            raise RuntimeError(f"Ingestion loop already {self.state.value}")
        
        self.state = IngestionState.RUNNING
        try:
            await self.feed.start()
            logger.info("Ingestion loop running")
            async for payload in self.feed:
                self._ingest(payload)
        except asyncio.CancelledError:
            logger.info("Ingestion loop cancelled")
            raise
        except Exception as e:
            self.last_error = e
            logger.error(f"Ingestion loop stopped on feed failure: {e!r}")
            raise
        finally:
            self.state = IngestionState.STOPPED
            logger.info(
                f"Ingestion loop stopped. Received: {self.received_count}, "
                f"recorded: {self.recorded_count}, dropped: {self.dropped_count}"
            )
    
    def _ingest(self, payload: bytes) -> None:
        self.received_count += 1
        try:
            tick = Tick.from_bytes(payload)
        except DecodeError as e:
            self.dropped_count += 1
            logger.warning(f"Dropping malformed tick payload: {e}")
            return
        
        self.store.record(tick)
        self.recorded_count += 1
        logger.debug(f"Recorded {tick.symbol} @ {tick.price}")
    
    def status(self) -> dict:
        return {
            "state": self.state.value,
            "received": self.received_count,
            "recorded": self.recorded_count,
            "dropped": self.dropped_count,
            "last_error": repr(self.last_error) if self.last_error else None,
        }
