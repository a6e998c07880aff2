"""Streaming per-symbol price aggregation over a RabbitMQ Stream tick feed."""

from .api import QueryAPI, QueryService
from .config import AggregatorConfig, ApiConfig, StreamConfig
from .exceptions import AggregatorError, DecodeError, FeedConnectionError
from .feed import Feed, MemoryFeed, StreamFeed
from .ingestion import IngestionLoop, IngestionState
from .models import Aggregate, Tick
from .store import AggregationStore

__all__ = [
    "Aggregate",
    "AggregationStore",
    "AggregatorConfig",
    "AggregatorError",
    "ApiConfig",
    "DecodeError",
    "Feed",
    "FeedConnectionError",
    "IngestionLoop",
    "IngestionState",
    "MemoryFeed",
    "QueryAPI",
    "QueryService",
    "StreamConfig",
    "StreamFeed",
    "Tick",
]
