"""
Tick Producer - Simulates stock prices and publishes them to RabbitMQ Stream.

Every round publishes one tick per symbol with a price drawn uniformly
between MIN_PRICE and MAX_PRICE, timestamped with the current UTC time.
"""

import argparse
import asyncio
import logging
import random
from datetime import datetime, timezone
from typing import List, Sequence

from rstream import AMQPMessage, Producer

from .config import AggregatorConfig, StreamConfig
from .models import Tick

logger = logging.getLogger(__name__)

SYMBOLS = ["AAPL", "GOOGL", "AMZN", "MSFT", "TSLA"]

MIN_PRICE = 100.0
MAX_PRICE = 500.0


def generate_ticks(symbols: Sequence[str] = SYMBOLS, rng: random.Random | None = None) -> List[Tick]:
    """Generate one simulated tick per symbol."""
    rng = rng or random
    timestamp = datetime.now(timezone.utc).isoformat()
    return [
        Tick(symbol=symbol, price=rng.uniform(MIN_PRICE, MAX_PRICE), timestamp=timestamp)
        for symbol in symbols
    ]


class TickProducer:
    """Publishes JSON-encoded ticks to a RabbitMQ Stream."""
    
    def __init__(self, config: StreamConfig, symbols: Sequence[str] = SYMBOLS):
        self.config = config
        if not symbols:
            raise ValueError("TickProducer needs at least one symbol")
        self.symbols = list(symbols)
        self.producer: Producer | None = None
        self.published_count = 0
    
    async def start(self) -> None:
        """Initialize the producer and create the stream."""
        self.producer = Producer(
            host=self.config.host,
            port=self.config.port,
            username=self.config.username,
            password=self.config.password,
            vhost=self.config.virtual_host,
        )
        await self.producer.start()
        
        # Create the stream if it doesn't exist
        await self.producer.create_stream(
            self.config.stream_name,
            arguments={
                "max-age": f"{self.config.max_age_seconds}s",
                "max-length-bytes": self.config.max_length_bytes,
                "max-segment-size-bytes": self.config.max_segment_size_bytes,
            },
            exists_ok=True,
        )
        
        logger.info(f"TickProducer initialized for stream: {self.config.stream_name}")
    
    async def stop(self) -> None:
        """Close the producer."""
        if self.producer:
            await self.producer.close()
            logger.info(f"TickProducer closed. Total published: {self.published_count}")
    
    async def publish(self, tick: Tick) -> None:
        """Publish a single tick."""
        if not self.producer:
            raise RuntimeError("Producer not started")
        
        await self.producer.send(
            stream=self.config.stream_name,
            message=AMQPMessage(body=tick.to_bytes()),
        )
        self.published_count += 1
        logger.debug(f"Published: {tick}")
    
    async def publish_round(self) -> List[Tick]:
        """Publish one simulated tick for every symbol."""
        ticks = generate_ticks(self.symbols)
        for tick in ticks:
            await self.publish(tick)
        return ticks
    
    async def run(self, interval_s: float = 2.0) -> None:
        """Publish a round of ticks every interval, forever."""
        logger.info(f"Publishing {len(self.symbols)} symbols every {interval_s}s")
        while True:
            ticks = await self.publish_round()
            logger.info(
                "Published: " + ", ".join(f"{t.symbol}={t.price:.2f}" for t in ticks)
            )
            await asyncio.sleep(interval_s)
    
    async def publish_batch(self, count: int, delay_ms: float = 0) -> None:
        """Generate and publish a fixed number of simulated ticks."""
        logger.info(f"Publishing {count} simulated ticks with {delay_ms}ms delay")
        
        loop = asyncio.get_running_loop()
        start_time = loop.time()
        
        published = 0
        while published < count:
            for tick in generate_ticks(self.symbols)[:count - published]:
                await self.publish(tick)
                published += 1
                
                if published % 10000 == 0:
                    logger.info(f"Published {published} ticks...")
            
            if delay_ms > 0 and published < count:
                await asyncio.sleep(delay_ms / 1000)
        
        duration = loop.time() - start_time
        throughput = count / duration if duration > 0 else 0
        
        logger.info(f"Publishing complete: {published} ticks, {throughput:.2f} msg/sec")


async def run_producer(
    config: StreamConfig,
    count: int | None = None,
    interval_s: float = 2.0,
    delay_ms: float = 0,
) -> None:
    producer = TickProducer(config)
    try:
        await producer.start()
        if count is None:
            await producer.run(interval_s)
        else:
            await producer.publish_batch(count, delay_ms=delay_ms)
    finally:
        await producer.stop()


def main():
    """Run the producer."""
    parser = argparse.ArgumentParser(description="Publish simulated stock ticks")
    parser.add_argument("--count", type=int, default=None, help="publish N ticks and exit")
    parser.add_argument("--interval", type=float, default=2.0, help="seconds between rounds")
    parser.add_argument("--delay-ms", type=float, default=0, help="delay between rounds when --count is given")
    args = parser.parse_args()
    
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s"
    )
    
    try:
        asyncio.run(run_producer(
            AggregatorConfig.from_env().stream, args.count, args.interval, args.delay_ms
        ))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")


if __name__ == "__main__":
    main()
