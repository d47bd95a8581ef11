"""Operation result types.

All amounts and prices are 18-decimal fixed-point integers.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SwapResult:
    """Result of a two-sided swap.

    Attributes:
        token_in: Token paid into the pool
        token_out: Token paid out of the pool
        amount_in: Amount of token_in paid, fee included
        amount_out: Amount of token_out received
        spot_price_before: Fee-inclusive spot price before the swap
        spot_price_after: Fee-inclusive spot price after the swap
        reserve_amount: Part of amount_in diverted to the protocol reserve
    """

    token_in: str
    token_out: str
    amount_in: int
    amount_out: int
    spot_price_before: int
    spot_price_after: int
    reserve_amount: int = 0


@dataclass(frozen=True)
class LiquidityResult:
    """Result of a proportional join or exit.

    Attributes:
        pool_amount: Shares minted (join) or burned (exit)
        token_amounts: Token amounts paid in or out, in bind order
    """

    pool_amount: int
    token_amounts: tuple[int, ...]


@dataclass(frozen=True)
class SingleSidedResult:
    """Result of a single-sided join or exit.

    Attributes:
        token: Token deposited or withdrawn
        token_amount: Amount of token paid in or out
        pool_amount: Shares minted or burned
        reserve_amount: Amount diverted to the protocol reserve
    """

    token: str
    token_amount: int
    pool_amount: int
    reserve_amount: int = 0
