"""Weighted pool engine.

This package provides the weighted constant-product pool with a protocol
reserve skim on fee-bearing flows.

Layers:
- state: immutable PoolState snapshot
- weighted_math: pure pricing functions
- reserves: reserve skim on fee-bearing flows
- updater: validated state transitions
- pool: WeightedPool facade with atomic commits
"""

# Errors
from .errors import (
    AlreadyFinalized,
    ExcessiveInput,
    InsufficientOutput,
    InvalidFeeError,
    InvalidToken,
    InvalidWeightError,
    LimitExceeded,
    MathApproximationError,
    MaxInRatioError,
    MaxOutRatioError,
    MinBalanceError,
    NotFinalized,
    PoolError,
    PriceLimitExceeded,
    TokenAlreadyBound,
    TokenCountError,
    ZeroBalanceError,
)

# Facade
from .pool import WeightedPool

# Reserve skim
from .reserves import ReserveSkim, effective_lp_fee

# Results
from .results import LiquidityResult, SingleSidedResult, SwapResult

# State
from .state import PoolPhase, PoolState

# Updater
from .updater import PoolDelta, apply_delta

# Weighted math
from .weighted_math import (
    calc_in_given_out,
    calc_invariant,
    calc_out_given_in,
    calc_pool_in_given_single_out,
    calc_pool_out_given_single_in,
    calc_single_in_given_pool_out,
    calc_single_out_given_pool_in,
    calc_spot_price,
)

__all__ = [
    # Facade
    "WeightedPool",
    # State
    "PoolState",
    "PoolPhase",
    "PoolDelta",
    "apply_delta",
    # Results
    "SwapResult",
    "LiquidityResult",
    "SingleSidedResult",
    # Reserve skim
    "ReserveSkim",
    "effective_lp_fee",
    # Weighted math
    "calc_spot_price",
    "calc_out_given_in",
    "calc_in_given_out",
    "calc_pool_out_given_single_in",
    "calc_single_in_given_pool_out",
    "calc_single_out_given_pool_in",
    "calc_pool_in_given_single_out",
    "calc_invariant",
    # Errors
    "PoolError",
    "NotFinalized",
    "AlreadyFinalized",
    "InvalidToken",
    "TokenAlreadyBound",
    "TokenCountError",
    "InvalidWeightError",
    "InvalidFeeError",
    "MinBalanceError",
    "ZeroBalanceError",
    "LimitExceeded",
    "InsufficientOutput",
    "ExcessiveInput",
    "MaxInRatioError",
    "MaxOutRatioError",
    "PriceLimitExceeded",
    "MathApproximationError",
]
