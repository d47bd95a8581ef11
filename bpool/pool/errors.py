"""Pool error classes.

These errors map to the BPool contract's revert reasons. Every error is
raised before the pool's state is replaced, so a failed call never leaves a
partial update behind.
"""


class PoolError(Exception):
    """Base error for pool operations."""

    pass


# =============================================================================
# Lifecycle
# =============================================================================


class NotFinalized(PoolError):
    """ERR_NOT_FINALIZED: Trading and liquidity operations need a finalized pool."""

    pass


class AlreadyFinalized(PoolError):
    """ERR_IS_FINALIZED: Configuration is frozen once the pool is finalized."""

    pass


class InvalidToken(PoolError):
    """ERR_NOT_BOUND: Token is not bound to the pool."""

    pass


class TokenAlreadyBound(PoolError):
    """ERR_IS_BOUND: Token is already bound to the pool."""

    pass


class TokenCountError(PoolError):
    """ERR_MIN_TOKENS / ERR_MAX_TOKENS: Token count outside the allowed range."""

    pass


class InvalidWeightError(PoolError):
    """ERR_MIN_WEIGHT / ERR_MAX_WEIGHT / ERR_MAX_TOTAL_WEIGHT."""

    pass


class InvalidFeeError(PoolError):
    """Fee or reserve ratio outside its allowed range."""

    pass


class MinBalanceError(PoolError):
    """ERR_MIN_BALANCE: Token bound with less than the minimum balance."""

    pass


class ZeroBalanceError(PoolError):
    """Token balance must stay positive after any operation."""

    pass


# =============================================================================
# Caller bounds
# =============================================================================


class LimitExceeded(PoolError):
    """ERR_LIMIT_IN / ERR_LIMIT_OUT: A caller-specified or protocol bound was violated."""

    pass


class InsufficientOutput(LimitExceeded):
    """ERR_LIMIT_OUT: Swap output is below the caller's minimum."""

    pass


class ExcessiveInput(LimitExceeded):
    """ERR_LIMIT_IN: Swap input is above the caller's maximum."""

    pass


class MaxInRatioError(LimitExceeded):
    """ERR_MAX_IN_RATIO: Token inflow exceeds the allowed fraction of its balance."""

    pass


class MaxOutRatioError(LimitExceeded):
    """ERR_MAX_OUT_RATIO: Token outflow exceeds the allowed fraction of its balance."""

    pass


class PriceLimitExceeded(PoolError):
    """ERR_BAD_LIMIT_PRICE / ERR_LIMIT_PRICE: Spot price above the caller's maximum."""

    pass


# =============================================================================
# Numeric sanity
# =============================================================================


class MathApproximationError(PoolError):
    """ERR_MATH_APPROX: A numeric sanity check failed.

    Indicates a rounding artefact rather than a caller mistake; never retried.
    """

    pass
