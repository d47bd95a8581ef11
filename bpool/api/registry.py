"""In-memory registry of pools served by the API."""

import threading

import structlog

from bpool.config import DEFAULT_POOL_CONFIG, PoolConfig
from bpool.pool import PoolError, WeightedPool

logger = structlog.get_logger()


class PoolNotFound(PoolError):
    """No pool is registered under the requested id."""

    pass


class PoolAlreadyExists(PoolError):
    """A pool is already registered under the requested id."""

    pass


class PoolRegistry:
    """Maps pool ids to pools. Each pool guards its own state."""

    def __init__(self, config: PoolConfig = DEFAULT_POOL_CONFIG) -> None:
        self.config = config
        self._pools: dict[str, WeightedPool] = {}
        self._lock = threading.Lock()

    def create(self, pool_id: str | None = None) -> WeightedPool:
        pool = WeightedPool(self.config, pool_id=pool_id)
        with self._lock:
            if pool.pool_id in self._pools:
                raise PoolAlreadyExists(f"Pool {pool.pool_id} already exists")
            self._pools[pool.pool_id] = pool
        logger.info("pool_created", pool_id=pool.pool_id)
        return pool

    def get(self, pool_id: str) -> WeightedPool:
        with self._lock:
            pool = self._pools.get(pool_id)
        if pool is None:
            raise PoolNotFound(f"Pool {pool_id} not found")
        return pool

    def ids(self) -> list[str]:
        with self._lock:
            return list(self._pools)

    def clear(self) -> None:
        with self._lock:
            self._pools.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._pools)


_default_registry = PoolRegistry()


def get_default_registry() -> PoolRegistry:
    """Process-wide registry used by the service."""
    return _default_registry
