"""Weighted pool state.

The state is an immutable snapshot: per-token data lives in parallel tuples
indexed by bind order, with a derived token -> index lookup. Operations build
a new snapshot instead of mutating this one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from bpool.math.fixed_point import Bfp

from .errors import InvalidToken


class PoolPhase(str, Enum):
    """Lifecycle phase of a pool."""

    CONFIGURING = "configuring"
    FINALIZED = "finalized"


def normalize_token(token: str) -> str:
    """Normalize a token id for lookups (case-insensitive)."""
    return token.strip().lower()


@dataclass(frozen=True)
class PoolState:
    """Snapshot of a weighted pool.

    Attributes:
        tokens: Bound token ids in bind order
        balances: Balance per token (18-decimal fixed-point)
        denorm_weights: Denormalized weight per token (18-decimal fixed-point)
        swap_fee: Swap fee fraction in [0, 1)
        exit_fee: Exit fee fraction in [0, 1)
        reserve_ratio: Share of fee-derived amounts diverted to the protocol reserve
        total_shares: Pool share supply
        phase: CONFIGURING until finalize(), FINALIZED afterwards
        collected_reserves: Amounts diverted to the protocol reserve per token
    """

    tokens: tuple[str, ...] = ()
    balances: tuple[int, ...] = ()
    denorm_weights: tuple[int, ...] = ()
    swap_fee: int = 0
    exit_fee: int = 0
    reserve_ratio: int = 0
    total_shares: int = 0
    phase: PoolPhase = PoolPhase.CONFIGURING
    collected_reserves: tuple[int, ...] = ()
    _index: dict[str, int] = field(init=False, repr=False, compare=False, hash=False)

    def __post_init__(self) -> None:
        n = len(self.tokens)
        if len(self.balances) != n or len(self.denorm_weights) != n:
            raise ValueError("tokens, balances and denorm_weights must have the same length")
        if len(self.collected_reserves) != n:
            raise ValueError("collected_reserves must have one entry per token")
        index = {token: i for i, token in enumerate(self.tokens)}
        if len(index) != n:
            raise ValueError(f"Duplicate token ids: {self.tokens}")
        object.__setattr__(self, "_index", index)

    @property
    def is_finalized(self) -> bool:
        return self.phase is PoolPhase.FINALIZED

    @property
    def num_tokens(self) -> int:
        return len(self.tokens)

    @property
    def total_weight(self) -> int:
        """Sum of denormalized weights."""
        return sum(self.denorm_weights)

    def is_bound(self, token: str) -> bool:
        return normalize_token(token) in self._index

    def index_of(self, token: str) -> int:
        """Return the position of a token.

        Raises:
            InvalidToken: If the token is not bound
        """
        try:
            return self._index[normalize_token(token)]
        except KeyError:
            raise InvalidToken(f"Token {token} is not bound") from None

    # Fixed-point views used by the pricing engine

    def balance(self, index: int) -> Bfp:
        return Bfp(self.balances[index])

    def weight(self, index: int) -> Bfp:
        return Bfp(self.denorm_weights[index])

    def normalized_weight(self, index: int) -> Bfp:
        """Denormalized weight divided by the total weight (rounded down)."""
        return Bfp(self.denorm_weights[index]).div_down(Bfp(self.total_weight))

    def supply(self) -> Bfp:
        return Bfp(self.total_shares)

    def fee(self) -> Bfp:
        return Bfp(self.swap_fee)

    def exit_fee_bfp(self) -> Bfp:
        return Bfp(self.exit_fee)

    def reserve_ratio_bfp(self) -> Bfp:
        return Bfp(self.reserve_ratio)
