"""Pool configuration."""

from dataclasses import dataclass

from bpool.constants import (
    INIT_POOL_SUPPLY,
    MAX_BOUND_TOKENS,
    MAX_IN_RATIO,
    MAX_OUT_RATIO,
    MAX_TOTAL_WEIGHT,
    MAX_WEIGHT,
    MIN_BALANCE,
    MIN_BOUND_TOKENS,
    MIN_WEIGHT,
)


@dataclass(frozen=True)
class PoolConfig:
    """Centralized configuration for pool bounds.

    This dataclass holds the protocol limits a pool enforces, making it easy
    to test with different limits while keeping a single source of defaults.
    All fixed-point fields are integers scaled by 10^18.

    Attributes:
        min_bound_tokens: Tokens required before finalize (default: 2)
        max_bound_tokens: Maximum tokens a pool can hold (default: 8)
        min_weight: Smallest denormalized weight (default: 1)
        max_weight: Largest denormalized weight (default: 50)
        max_total_weight: Largest sum of denormalized weights (default: 50)
        min_balance: Smallest balance a token can be bound with (default: 1e-12)
        init_pool_supply: Shares minted on finalize (default: 100)
        max_in_ratio: Largest token inflow as a fraction of its balance (default: 1/2)
        max_out_ratio: Largest token outflow as a fraction of its balance (default: 1/3)
    """

    # Token count
    min_bound_tokens: int = MIN_BOUND_TOKENS
    max_bound_tokens: int = MAX_BOUND_TOKENS

    # Weights
    min_weight: int = MIN_WEIGHT
    max_weight: int = MAX_WEIGHT
    max_total_weight: int = MAX_TOTAL_WEIGHT

    # Balances and supply
    min_balance: int = MIN_BALANCE
    init_pool_supply: int = INIT_POOL_SUPPLY

    # Trade size limits
    max_in_ratio: int = MAX_IN_RATIO
    max_out_ratio: int = MAX_OUT_RATIO


# Default configuration instance
DEFAULT_POOL_CONFIG = PoolConfig()
