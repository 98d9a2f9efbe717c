"""
Registry of pools keyed by pool_id.

Each pool keeps its own lock; the registry lock only guards the mapping.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Iterator, List, Optional

from ..state.balances import AssetId
from ..state.pools import compute_pool_id, validate_asset_pair
from .errors import InvalidConfiguration, PoolExists, PoolNotFound
from .events import EventListener
from .ledger import Ledger
from .pool import PoolEngine, PoolEngineConfig

logger = logging.getLogger(__name__)


class PoolRegistry:
    """One `PoolEngine` per unordered asset pair, all sharing a ledger."""

    def __init__(
        self,
        ledger: Ledger,
        *,
        config: Optional[PoolEngineConfig] = None,
        on_event: Optional[EventListener] = None,
    ) -> None:
        self.ledger = ledger
        self.config = config or PoolEngineConfig()
        self._on_event = on_event
        self._pools: Dict[str, PoolEngine] = {}
        self._lock = threading.Lock()

    @staticmethod
    def pool_id_for(asset_a: AssetId, asset_b: AssetId) -> str:
        try:
            return compute_pool_id(asset_a, asset_b)
        except ValueError as exc:
            raise InvalidConfiguration(str(exc)) from exc

    def create_pool(self, asset_a: AssetId, asset_b: AssetId, *, created_at: int = 0) -> PoolEngine:
        """
        Raises:
            InvalidConfiguration: If the assets are missing or identical
            PoolExists: If the pair (in either order) already has a pool
        """
        try:
            validate_asset_pair(asset_a, asset_b)
        except ValueError as exc:
            raise InvalidConfiguration(str(exc)) from exc
        pool_id = compute_pool_id(asset_a, asset_b)
        with self._lock:
            if pool_id in self._pools:
                raise PoolExists(f"pool for ({asset_a}, {asset_b}) already exists: {pool_id}")
            engine = PoolEngine(
                asset_a,
                asset_b,
                self.ledger,
                config=self.config,
                on_event=self._on_event,
                created_at=created_at,
            )
            self._pools[pool_id] = engine
        logger.info("created pool %s for (%s, %s)", pool_id, asset_a, asset_b)
        return engine

    def add(self, engine: PoolEngine) -> None:
        """Register an existing engine (e.g. one restored from a snapshot)."""
        with self._lock:
            if engine.pool_id in self._pools:
                raise PoolExists(f"pool already registered: {engine.pool_id}")
            self._pools[engine.pool_id] = engine

    def get(self, pool_id: str) -> PoolEngine:
        with self._lock:
            engine = self._pools.get(pool_id)
        if engine is None:
            raise PoolNotFound(f"unknown pool_id: {pool_id}")
        return engine

    def get_pool(self, asset_a: AssetId, asset_b: AssetId) -> PoolEngine:
        """Look up by asset pair; order does not matter."""
        return self.get(self.pool_id_for(asset_a, asset_b))

    def pool_ids(self) -> List[str]:
        with self._lock:
            return sorted(self._pools)

    def __contains__(self, pool_id: object) -> bool:
        with self._lock:
            return pool_id in self._pools

    def __len__(self) -> int:
        with self._lock:
            return len(self._pools)

    def __iter__(self) -> Iterator[PoolEngine]:
        with self._lock:
            engines = [self._pools[k] for k in sorted(self._pools)]
        return iter(engines)
