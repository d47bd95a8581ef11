"""Weighted AMM pool engine with a protocol reserve skim."""

from bpool.config import DEFAULT_POOL_CONFIG, PoolConfig
from bpool.pool import WeightedPool

__version__ = "0.1.0"
__all__ = ["WeightedPool", "PoolConfig", "DEFAULT_POOL_CONFIG", "__version__"]
