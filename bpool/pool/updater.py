"""Balance updater for weighted pools.

Applies computed deltas and configuration changes to a PoolState. Each
function validates the complete change first and then returns a new
snapshot; the input state is never modified, so a failed validation leaves
nothing half-applied.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from bpool.config import PoolConfig
from bpool.constants import BONE
from bpool.math.fixed_point import Underflow

from .errors import (
    AlreadyFinalized,
    InvalidFeeError,
    InvalidWeightError,
    MinBalanceError,
    NotFinalized,
    TokenAlreadyBound,
    TokenCountError,
    ZeroBalanceError,
)
from .state import PoolPhase, PoolState, normalize_token


@dataclass(frozen=True)
class PoolDelta:
    """Signed changes produced by one pool operation.

    Attributes:
        balance_deltas: Signed balance change per token, in bind order
        shares_delta: Signed change of the pool share supply
        reserve_amounts: Amount diverted to the protocol reserve per token
    """

    balance_deltas: tuple[int, ...]
    shares_delta: int = 0
    reserve_amounts: tuple[int, ...] = ()

    @classmethod
    def single(
        cls,
        num_tokens: int,
        index: int,
        balance_delta: int,
        shares_delta: int = 0,
        reserve_amount: int = 0,
    ) -> PoolDelta:
        """Delta touching one token."""
        deltas = [0] * num_tokens
        deltas[index] = balance_delta
        reserves = [0] * num_tokens
        reserves[index] = reserve_amount
        return cls(tuple(deltas), shares_delta, tuple(reserves))

    @classmethod
    def pair(
        cls,
        num_tokens: int,
        index_in: int,
        delta_in: int,
        index_out: int,
        delta_out: int,
        reserve_in: int = 0,
    ) -> PoolDelta:
        """Delta of a two-sided swap."""
        deltas = [0] * num_tokens
        deltas[index_in] = delta_in
        deltas[index_out] = delta_out
        reserves = [0] * num_tokens
        reserves[index_in] = reserve_in
        return cls(tuple(deltas), 0, tuple(reserves))


# =============================================================================
# Phase guards
# =============================================================================


def require_configuring(state: PoolState) -> None:
    if state.phase is not PoolPhase.CONFIGURING:
        raise AlreadyFinalized("Pool is finalized")


def require_finalized(state: PoolState) -> None:
    if state.phase is not PoolPhase.FINALIZED:
        raise NotFinalized("Pool is not finalized")


# =============================================================================
# Operation deltas
# =============================================================================


def apply_delta(state: PoolState, delta: PoolDelta) -> PoolState:
    """Apply an operation's deltas as one unit.

    Raises:
        ValueError: If the delta does not match the pool's token count
        ZeroBalanceError: If any balance would drop to zero or below
        Underflow: If the share supply would go negative
    """
    n = state.num_tokens
    if len(delta.balance_deltas) != n:
        raise ValueError(f"Expected {n} balance deltas, got {len(delta.balance_deltas)}")
    reserve_amounts = delta.reserve_amounts or (0,) * n
    if len(reserve_amounts) != n:
        raise ValueError(f"Expected {n} reserve amounts, got {len(reserve_amounts)}")

    new_balances = tuple(b + d for b, d in zip(state.balances, delta.balance_deltas))
    for token, balance in zip(state.tokens, new_balances):
        if balance <= 0:
            raise ZeroBalanceError(f"Balance of {token} would drop to {balance}")

    new_total_shares = state.total_shares + delta.shares_delta
    if new_total_shares < 0:
        raise Underflow(f"Share supply would drop to {new_total_shares}")

    collected = tuple(c + r for c, r in zip(state.collected_reserves, reserve_amounts))

    return replace(
        state,
        balances=new_balances,
        total_shares=new_total_shares,
        collected_reserves=collected,
    )


# =============================================================================
# Configuration changes
# =============================================================================


def _check_balance(balance: int, config: PoolConfig) -> None:
    if balance < config.min_balance:
        raise MinBalanceError(f"Balance {balance} below minimum {config.min_balance}")


def _check_weight(denorm: int, config: PoolConfig) -> None:
    if denorm < config.min_weight:
        raise InvalidWeightError(f"Weight {denorm} below minimum {config.min_weight}")
    if denorm > config.max_weight:
        raise InvalidWeightError(f"Weight {denorm} above maximum {config.max_weight}")


def _check_total_weight(total: int, config: PoolConfig) -> None:
    if total > config.max_total_weight:
        raise InvalidWeightError(f"Total weight {total} above maximum {config.max_total_weight}")


def bind_token(state: PoolState, token: str, balance: int, denorm: int, config: PoolConfig) -> PoolState:
    """Add a token with its initial balance and denormalized weight."""
    require_configuring(state)
    token_id = normalize_token(token)
    if not token_id:
        raise ValueError("Token id must be non-empty")
    if state.is_bound(token_id):
        raise TokenAlreadyBound(f"Token {token} is already bound")
    if state.num_tokens >= config.max_bound_tokens:
        raise TokenCountError(f"Pool already holds {config.max_bound_tokens} tokens")
    _check_weight(denorm, config)
    _check_balance(balance, config)
    _check_total_weight(state.total_weight + denorm, config)

    return replace(
        state,
        tokens=state.tokens + (token_id,),
        balances=state.balances + (balance,),
        denorm_weights=state.denorm_weights + (denorm,),
        collected_reserves=state.collected_reserves + (0,),
    )


def rebind_token(state: PoolState, token: str, balance: int, denorm: int, config: PoolConfig) -> PoolState:
    """Change the balance and weight of a bound token."""
    require_configuring(state)
    index = state.index_of(token)
    _check_weight(denorm, config)
    _check_balance(balance, config)
    _check_total_weight(state.total_weight - state.denorm_weights[index] + denorm, config)

    balances = list(state.balances)
    weights = list(state.denorm_weights)
    balances[index] = balance
    weights[index] = denorm
    return replace(state, balances=tuple(balances), denorm_weights=tuple(weights))


def unbind_token(state: PoolState, token: str) -> tuple[PoolState, int]:
    """Remove a token. Returns the new state and the released balance."""
    require_configuring(state)
    index = state.index_of(token)

    def without(values: tuple) -> tuple:
        return values[:index] + values[index + 1 :]

    new_state = replace(
        state,
        tokens=without(state.tokens),
        balances=without(state.balances),
        denorm_weights=without(state.denorm_weights),
        collected_reserves=without(state.collected_reserves),
    )
    return new_state, state.balances[index]


def set_fees(
    state: PoolState,
    *,
    swap_fee: int | None = None,
    exit_fee: int | None = None,
    reserve_ratio: int | None = None,
) -> PoolState:
    """Update fee parameters. Fees must lie in [0, 1); the reserve ratio in [0, 1]."""
    require_configuring(state)
    changes: dict[str, int] = {}
    if swap_fee is not None:
        if not 0 <= swap_fee < BONE:
            raise InvalidFeeError(f"Swap fee must be in range [0, 1), got {swap_fee}")
        changes["swap_fee"] = swap_fee
    if exit_fee is not None:
        if not 0 <= exit_fee < BONE:
            raise InvalidFeeError(f"Exit fee must be in range [0, 1), got {exit_fee}")
        changes["exit_fee"] = exit_fee
    if reserve_ratio is not None:
        if not 0 <= reserve_ratio <= BONE:
            raise InvalidFeeError(f"Reserve ratio must be in range [0, 1], got {reserve_ratio}")
        changes["reserve_ratio"] = reserve_ratio
    return replace(state, **changes)


def finalize_state(state: PoolState, config: PoolConfig) -> PoolState:
    """Freeze the configuration and mint the initial share supply."""
    require_configuring(state)
    if state.num_tokens < config.min_bound_tokens:
        raise TokenCountError(
            f"Pool needs at least {config.min_bound_tokens} tokens, has {state.num_tokens}"
        )
    return replace(state, phase=PoolPhase.FINALIZED, total_shares=config.init_pool_supply)
