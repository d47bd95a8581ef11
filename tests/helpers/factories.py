"""Factory functions for creating test pools.

Usage:
    from tests.helpers import make_pool

    pool = make_pool({WETH: ("1000", "1"), DAI: ("1000", "49")}, swap_fee="0.001")
"""

from decimal import Decimal

from bpool import PoolConfig, WeightedPool
from bpool.config import DEFAULT_POOL_CONFIG
from tests.helpers.numbers import to_wei


def make_pool(
    tokens: dict[str, tuple[str, str]],
    swap_fee: str = "0",
    exit_fee: str = "0",
    reserve_ratio: str = "0",
    finalize: bool = True,
    config: PoolConfig = DEFAULT_POOL_CONFIG,
) -> WeightedPool:
    """Create a pool with sensible defaults.

    Args:
        tokens: Mapping of token -> (balance, denormalized weight) as decimal strings
        swap_fee: Swap fee fraction (default: 0)
        exit_fee: Exit fee fraction (default: 0)
        reserve_ratio: Reserve ratio (default: 0)
        finalize: Finalize the pool after configuring it (default: True)
        config: Pool bounds

    Returns:
        WeightedPool, finalized unless finalize=False
    """
    pool = WeightedPool(config)
    for token, (balance, denorm) in tokens.items():
        pool.bind(token, to_wei(balance), Decimal(denorm))
    pool.set_swap_fee(Decimal(swap_fee))
    pool.set_exit_fee(Decimal(exit_fee))
    pool.set_reserve_ratio(Decimal(reserve_ratio))
    if finalize:
        pool.finalize()
    return pool
