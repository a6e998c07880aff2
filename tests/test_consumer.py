import logging
from unittest.mock import AsyncMock

import pytest

from tick_aggregator.consumer import run_consumer, tail

from conftest import make_tick


@pytest.mark.asyncio
async def test_tail_logs_ticks_and_parse_failures(feed, caplog):
    feed.publish(make_tick("AAPL", 185.5))
    feed.publish_raw(b"nope")
    feed.publish(make_tick("TSLA", 248.75))
    await feed.close()

    with caplog.at_level(logging.INFO, logger="tick_aggregator.consumer"):
        received = await tail(feed)

    assert received == 2
    assert "Received:" in caplog.text
    assert "TSLA" in caplog.text
    assert "Failed to parse message" in caplog.text


@pytest.mark.asyncio
async def test_run_consumer_closes_feed(feed):
    feed.publish(make_tick())
    await feed.close()
    feed.close = AsyncMock()

    await run_consumer(feed)

    feed.close.assert_awaited_once()
