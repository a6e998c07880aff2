"""
Tick Consumer - Logs every tick published on the stream.

Useful to watch the raw feed without running the aggregator.
"""

import asyncio
import logging

from .config import AggregatorConfig
from .exceptions import DecodeError
from .feed import Feed, StreamFeed
from .models import Tick

logger = logging.getLogger(__name__)


async def tail(feed: Feed) -> int:
    """Log each decoded tick until the feed ends; returns the number received."""
    received = 0
    await feed.start()
    async for payload in feed:
        try:
            tick = Tick.from_bytes(payload)
        except DecodeError as e:
            logger.error(f"Failed to parse message: {e}")
            continue
        
        received += 1
        logger.info(f"Received: {tick!r}")
    return received


async def run_consumer(feed: Feed) -> None:
    try:
        await tail(feed)
    finally:
        await feed.close()


def main():
    """Run the consumer."""
    config = AggregatorConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s"
    )
    
    try:
        asyncio.run(run_consumer(StreamFeed(config.stream)))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")


if __name__ == "__main__":
    main()
