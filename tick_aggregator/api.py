"""Read-only query API over the aggregation store."""

import logging
from typing import Dict, List, Optional

import orjson
from aiohttp import web

from .config import ApiConfig
from .ingestion import IngestionLoop, IngestionState
from .store import AggregationStore

logger = logging.getLogger(__name__)


class QueryService:
    """Read operations over the store, returning plain JSON-ready data.
    
    Unknown symbols yield None rather than a zeroed record.
    """
    
    def __init__(self, store: AggregationStore):
        self.store = store
    
    def get_all_aggregates(self) -> Dict[str, dict]:
        snapshot = self.store.snapshot_all_aggregates()
        return {symbol: stats.to_dict() for symbol, stats in snapshot.items()}
    
    def get_all_raw(self) -> Dict[str, List[dict]]:
        snapshot = self.store.snapshot_all_raw()
        return {
            symbol: [tick.model_dump() for tick in history]
            for symbol, history in snapshot.items()
        }
    
    def get_aggregate(self, symbol: str) -> Optional[dict]:
        stats = self.store.snapshot_aggregate(symbol)
        return stats.to_dict() if stats is not None else None
    
    def get_raw(self, symbol: str) -> Optional[List[dict]]:
        history = self.store.snapshot_raw(symbol)
        if history is None:
            return None
        return [tick.model_dump() for tick in history]


def _json(data, status: int = 200) -> web.Response:
    return web.Response(
        body=orjson.dumps(data),
        status=status,
        content_type="application/json",
    )


def _not_found(symbol: str) -> web.Response:
    return _json({"error": "not found", "symbol": symbol}, status=404)


class QueryAPI:
    """HTTP surface for the QueryService."""
    
    def __init__(
        self,
        query: QueryService,
        config: ApiConfig,
        ingestion: IngestionLoop | None = None,
    ):
        self.query = query
        self.config = config
        self.ingestion = ingestion
        self.port = config.port
        self.runner: web.AppRunner | None = None
        self.site: web.TCPSite | None = None
    
    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/aggregate", self.get_stats)
        app.router.add_get("/raw", self.get_raw)
        app.router.add_get("/aggregate/{symbol}", self.get_stats_for_symbol)
        app.router.add_get("/raw/{symbol}", self.get_raw_for_symbol)
        app.router.add_get("/health", self.health)
        return app
    
    async def start(self) -> None:
        """Start serving on the configured address."""
        self.runner = web.AppRunner(self.build_app())
        await self.runner.setup()
        self.site = web.TCPSite(self.runner, self.config.host, self.config.port)
        await self.site.start()
        
        if self.site._server and self.site._server.sockets:
            self.port = self.site._server.sockets[0].getsockname()[1]
        logger.info(f"Query API running on http://{self.config.host}:{self.port}")
    
    async def stop(self) -> None:
        if self.runner:
            await self.runner.cleanup()
            self.site = None
            logger.info("Query API stopped")
    
    async def get_stats(self, request: web.Request) -> web.Response:
        return _json(self.query.get_all_aggregates())
    
    async def get_raw(self, request: web.Request) -> web.Response:
        return _json(self.query.get_all_raw())
    
    async def get_stats_for_symbol(self, request: web.Request) -> web.Response:
        symbol = request.match_info["symbol"]
        stats = self.query.get_aggregate(symbol)
        if stats is None:
            return _not_found(symbol)
        return _json(stats)
    
    async def get_raw_for_symbol(self, request: web.Request) -> web.Response:
        symbol = request.match_info["symbol"]
        history = self.query.get_raw(symbol)
        if history is None:
            return _not_found(symbol)
        return _json(history)
    
    async def health(self, request: web.Request) -> web.Response:
        body = {"symbols": self.query.store.symbols()}
        if self.ingestion is None:
            return _json(body)
        
        body["ingestion"] = self.ingestion.status()
        healthy = self.ingestion.state is IngestionState.RUNNING
        return _json(body, status=200 if healthy else 503)
