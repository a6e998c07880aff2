"""Configuration for the stream connection and the query API."""

import os
from dataclasses import dataclass, field


@dataclass
class StreamConfig:
    """Configuration for RabbitMQ Stream connections."""
    
    host: str = "localhost"
    port: int = 5552
    username: str = "guest"
    password: str = "guest"
    virtual_host: str = "/"
    stream_name: str = "stock_prices"
    max_age_seconds: int = 86400  # 24 hours
    max_length_bytes: int = 1_000_000_000  # 1 GB
    max_segment_size_bytes: int = 100_000_000  # 100 MB
    
    @classmethod
    def defaults(cls) -> "StreamConfig":
        """Create default configuration."""
        return cls()


@dataclass
class ApiConfig:
    """Bind address of the HTTP query API."""
    
    host: str = "127.0.0.1"
    port: int = 3002
    
    @classmethod
    def defaults(cls) -> "ApiConfig":
        return cls()


@dataclass
class AggregatorConfig:
    """Top-level configuration of the aggregator service."""
    
    stream: StreamConfig = field(default_factory=StreamConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    log_level: str = "INFO"
    
    @classmethod
    def defaults(cls) -> "AggregatorConfig":
        """Create default configuration."""
        return cls()
    
    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "AggregatorConfig":
        """Create configuration from TICK_* environment variables."""
        env = os.environ if environ is None else environ
        stream = StreamConfig(
            host=env.get("TICK_STREAM_HOST", StreamConfig.host),
            port=int(env.get("TICK_STREAM_PORT", StreamConfig.port)),
            username=env.get("TICK_STREAM_USER", StreamConfig.username),
            password=env.get("TICK_STREAM_PASSWORD", StreamConfig.password),
            virtual_host=env.get("TICK_STREAM_VHOST", StreamConfig.virtual_host),
            stream_name=env.get("TICK_STREAM_NAME", StreamConfig.stream_name),
        )
        api = ApiConfig(
            host=env.get("TICK_API_HOST", ApiConfig.host),
            port=int(env.get("TICK_API_PORT", ApiConfig.port)),
        )
        return cls(
            stream=stream,
            api=api,
            log_level=env.get("TICK_LOG_LEVEL", "INFO").upper(),
        )
