import asyncio

import aiohttp
import pytest

from tick_aggregator.config import AggregatorConfig, ApiConfig
from tick_aggregator.exceptions import FeedConnectionError
from tick_aggregator.service import AggregatorService, run_service

from conftest import make_tick


def local_config():
    return AggregatorConfig(api=ApiConfig(host="127.0.0.1", port=0))


@pytest.mark.asyncio
async def test_service_serves_ingested_ticks(feed):
    service = AggregatorService(local_config(), feed)
    await service.start()
    try:
        feed.publish(make_tick("AAPL", 100.0))
        feed.publish(make_tick("AAPL", 200.0))
        while service.ingestion.recorded_count < 2:
            await asyncio.sleep(0.01)

        url = f"http://127.0.0.1:{service.api.port}/aggregate/AAPL"
        async with aiohttp.ClientSession() as session:
            async with session.get(url) as resp:
                assert resp.status == 200
                assert await resp.json() == {
                    "total": 300.0, "count": 2, "average": 150.0, "latest": 200.0,
                }
    finally:
        await service.stop()


@pytest.mark.asyncio
async def test_wait_before_start_raises(feed):
    service = AggregatorService(local_config(), feed)
    with pytest.raises(RuntimeError):
        await service.wait()


@pytest.mark.asyncio
async def test_run_service_exits_with_failure_on_feed_error(feed):
    feed.publish(make_tick())
    feed.fail(FeedConnectionError("connection reset"))

    assert await run_service(local_config(), feed) == 1


@pytest.mark.asyncio
async def test_run_service_exits_cleanly_when_feed_closes(feed):
    feed.publish(make_tick())
    await feed.close()

    assert await run_service(local_config(), feed) == 0
