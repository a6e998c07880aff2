"""Errors raised by the tick aggregator."""


class AggregatorError(Exception):
    """Base class for tick aggregator errors."""


class DecodeError(AggregatorError):
    """A payload could not be decoded as a tick."""

    def __init__(self, message: str, payload: bytes = b""):
        super().__init__(message)
        self.payload = payload


class FeedConnectionError(AggregatorError):
    """The feed could not be reached, or dropped its connection."""
