"""In-memory aggregation store.

Holds the raw tick history and the running aggregate of every symbol seen
so far. Both mappings sit behind one lock so that a reader never observes a
history append without the matching aggregate update.
"""

import logging
import threading
from typing import Dict, List, Optional

from .models import Aggregate, Tick

logger = logging.getLogger(__name__)


class AggregationStore:
    """Concurrently accessible per-symbol tick history and statistics."""
    
    def __init__(self):
        self._raw: Dict[str, List[Tick]] = {}
        self._stats: Dict[str, Aggregate] = {}
        self._lock = threading.Lock()
    
    def record(self, tick: Tick) -> None:
        """Append a tick to its symbol's history and fold it into the aggregate."""
        with self._lock:
            history = self._raw.get(tick.symbol)
            if history is None:
                history = self._raw[tick.symbol] = []
                self._stats[tick.symbol] = Aggregate()
                logger.debug(f"New symbol: {tick.symbol}")
            history.append(tick)
            self._stats[tick.symbol].fold(tick)
    
    def snapshot_all_aggregates(self) -> Dict[str, Aggregate]:
        """Copy of every symbol's current aggregate."""
        with self._lock:
            return {symbol: stats.model_copy() for symbol, stats in self._stats.items()}
    
    def snapshot_all_raw(self) -> Dict[str, List[Tick]]:
        """Copy of every symbol's tick history."""
        with self._lock:
            # Ticks are frozen, copying the lists is enough
            return {symbol: list(history) for symbol, history in self._raw.items()}
    
    def snapshot_aggregate(self, symbol: str) -> Optional[Aggregate]:
        """Copy of one symbol's aggregate, or None if it was never observed."""
        with self._lock:
            stats = self._stats.get(symbol)
            return stats.model_copy() if stats is not None else None
    
    def snapshot_raw(self, symbol: str) -> Optional[List[Tick]]:
        """Copy of one symbol's history, or None if it was never observed."""
        with self._lock:
            history = self._raw.get(symbol)
            return list(history) if history is not None else None
    
    def symbols(self) -> List[str]:
        with self._lock:
            return sorted(self._stats)
    
    def __len__(self) -> int:
        with self._lock:
            return len(self._stats)
