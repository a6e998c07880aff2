"""
Tick feeds - sources of raw tick payloads for the ingestion loop.

A feed is started once and then iterated with ``async for``; it yields the
opaque byte payload of every message in delivery order. Iteration ends when
the feed is closed, and raises FeedConnectionError when the transport fails.

Two feeds are provided:
- MemoryFeed: an in-process bus, also used as the publish side in tests
- StreamFeed: a RabbitMQ Stream subscription
"""

import asyncio
import logging
from typing import AsyncIterator, Protocol, Union

from rstream import (
    AMQPMessage,
    Consumer,
    ConsumerOffsetSpecification,
    MessageContext,
    OffsetType,
    amqp_decoder,
)

from .config import StreamConfig
from .exceptions import FeedConnectionError
from .models import Tick

logger = logging.getLogger(__name__)

_CLOSED = object()


class Feed(Protocol):
    """Subscription handle yielding raw tick payloads."""
    
    async def start(self) -> None: ...
    
    async def close(self) -> None: ...
    
    def __aiter__(self) -> AsyncIterator[bytes]: ...


class _QueueFeed:
    """Feed backed by an asyncio queue of payloads, errors and a close marker."""
    
    def __init__(self):
        self._queue: asyncio.Queue[Union[bytes, BaseException, object]] = asyncio.Queue()
        self._closed = False
    
    async def __aiter__(self) -> AsyncIterator[bytes]:
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                return
            if isinstance(item, BaseException):
                raise item
            yield item
    
    def _push(self, item) -> None:
        if not self._closed:
            self._queue.put_nowait(item)
    
    def _finish(self, item=_CLOSED) -> None:
        if not self._closed:
            self._queue.put_nowait(item)
            self._closed = True


class MemoryFeed(_QueueFeed):
    """In-process feed; whatever is published is delivered to the iterator."""
    
    async def start(self) -> None:
        logger.debug("MemoryFeed started")
    
    async def close(self) -> None:
        self._finish()
    
    def publish(self, tick: Tick) -> None:
        """Publish a JSON-encoded tick."""
        self._push(tick.to_bytes())
    
    def publish_raw(self, payload: bytes) -> None:
        """Publish an arbitrary payload, well-formed or not."""
        self._push(payload)
    
    def fail(self, error: Exception) -> None:
        """Terminate the feed with a transport error."""
        self._finish(error)


class StreamFeed(_QueueFeed):
    """Subscribes to the tick stream on RabbitMQ and yields message bodies."""
    
    def __init__(self, config: StreamConfig):
        super().__init__()
        self.config = config
        self.consumer: Consumer | None = None
        self.message_count = 0
        self.last_offset = -1
    
    async def start(self) -> None:
        """Connect and subscribe to new messages on the stream."""
        self.consumer = Consumer(
            host=self.config.host,
            port=self.config.port,
            username=self.config.username,
            password=self.config.password,
            vhost=self.config.virtual_host,
            on_close_handler=self._on_close,
        )
        try:
            await self.consumer.start()
            await self.consumer.subscribe(
                stream=self.config.stream_name,
                callback=self._on_message,
                offset_specification=ConsumerOffsetSpecification(OffsetType.NEXT, None),
                decoder=amqp_decoder,  # Decode AMQP messages
            )
        except Exception as e:
            raise FeedConnectionError(
                f"Cannot subscribe to stream {self.config.stream_name!r} "
                f"at {self.config.host}:{self.config.port}: {e}"
            ) from e
        
        logger.info(f"StreamFeed subscribed to stream: {self.config.stream_name}")
    
    async def close(self) -> None:
        """Close the consumer and end iteration."""
        self._finish()
        if self.consumer:
            await self.consumer.close()
            logger.info(f"StreamFeed closed. Total messages: {self.message_count}")
    
    async def _on_message(self, msg: AMQPMessage, context: MessageContext) -> None:
        self.message_count += 1
        self.last_offset = context.offset
        self._push(msg.body)
    
    async def _on_close(self, info) -> None:
        reason = getattr(info, "reason", info)
        logger.error(f"Stream connection closed by broker: {reason}")
        self._finish(FeedConnectionError(f"Stream connection closed: {reason}"))
