"""Pytest configuration and fixtures."""

import pytest

from tick_aggregator.feed import MemoryFeed
from tick_aggregator.models import Tick
from tick_aggregator.store import AggregationStore


def make_tick(symbol: str = "AAPL", price: float = 100.0, timestamp: str = "2025-03-14T09:30:00+00:00") -> Tick:
    return Tick(symbol=symbol, price=price, timestamp=timestamp)


@pytest.fixture
def store():
    return AggregationStore()


@pytest.fixture
def feed():
    return MemoryFeed()


@pytest.fixture
def sample_ticks():
    """AAPL twice and GOOGL once."""
    return [
        make_tick("AAPL", 100.0, "2025-03-14T09:30:00+00:00"),
        make_tick("AAPL", 200.0, "2025-03-14T09:30:01+00:00"),
        make_tick("GOOGL", 50.0, "2025-03-14T09:30:02+00:00"),
    ]
