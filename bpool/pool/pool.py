"""Weighted pool facade.

WeightedPool exposes the pool call surface: configuration while the pool is
being set up, then swaps and liquidity operations once it is finalized.

Every operation follows the same shape: read the current immutable
PoolState, compute the result and the full delta with the pricing engine and
the reserve skim, let the balance updater build the next state, run the
post-trade sanity checks, and only then swap the state reference. Any error
leaves the previous state in place.
"""

from __future__ import annotations

import threading
import uuid
from collections.abc import Callable, Sequence
from dataclasses import asdict
from decimal import Decimal
from typing import TypeVar

import structlog

from bpool.config import DEFAULT_POOL_CONFIG, PoolConfig
from bpool.math.fixed_point import Bfp, FixedPointError

from .errors import (
    ExcessiveInput,
    InsufficientOutput,
    LimitExceeded,
    MathApproximationError,
    MaxInRatioError,
    MaxOutRatioError,
    PoolError,
    PriceLimitExceeded,
)
from .reserves import skim, skim_single_in, skim_single_out, skim_swap_in
from .results import LiquidityResult, SingleSidedResult, SwapResult
from .state import PoolState
from .updater import (
    PoolDelta,
    apply_delta,
    bind_token,
    finalize_state,
    rebind_token,
    require_finalized,
    set_fees as update_fees,
    unbind_token,
)
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

logger = structlog.get_logger()

R = TypeVar("R")


def _require_amount(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} cannot be negative: {value}")


def _require_bounds(name: str, bounds: Sequence[int] | None, num_tokens: int) -> None:
    if bounds is None:
        return
    if len(bounds) != num_tokens:
        raise ValueError(f"{name} needs {num_tokens} entries, got {len(bounds)}")
    for bound in bounds:
        _require_amount(name, bound)


class WeightedPool:
    """A weighted constant-product pool.

    Token amounts, balances, shares and prices are 18-decimal fixed-point
    integers. Fees, ratios and weights are passed and returned as Decimal.

    Example:
        pool = WeightedPool()
        pool.bind("WETH", 1000 * 10**18, Decimal("1"))
        pool.bind("DAI", 1000 * 10**18, Decimal("49"))
        pool.set_swap_fee(Decimal("0.001"))
        pool.finalize()
        result = pool.swap_exact_amount_in("WETH", 10**18, "DAI")
    """

    def __init__(
        self,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
        *,
        pool_id: str | None = None,
        state: PoolState | None = None,
    ) -> None:
        self.config = config
        self.pool_id = pool_id or uuid.uuid4().hex
        self._state = state if state is not None else PoolState()
        self._lock = threading.RLock()

    @property
    def state(self) -> PoolState:
        """Current immutable snapshot."""
        return self._state

    def copy(self, pool_id: str | None = None) -> WeightedPool:
        """Independent pool starting from the current state (for dry runs)."""
        return WeightedPool(self.config, pool_id=pool_id or self.pool_id, state=self._state)

    def _execute(self, operation: str, plan: Callable[[PoolState], tuple[PoolState, R]]) -> R:
        """Run a state transition under the pool lock and commit it atomically."""
        with self._lock:
            try:
                new_state, result = plan(self._state)
            except (PoolError, FixedPointError) as err:
                logger.debug(
                    "pool_operation_rejected",
                    pool_id=self.pool_id,
                    operation=operation,
                    error=type(err).__name__,
                    detail=str(err),
                )
                raise
            self._state = new_state

        if isinstance(result, (SwapResult, LiquidityResult, SingleSidedResult)):
            logger.info(operation, pool_id=self.pool_id, **asdict(result))
        else:
            logger.info(operation, pool_id=self.pool_id, result=result)
        return result

    # =========================================================================
    # Configuration
    # =========================================================================

    def bind(self, token: str, balance: int, denorm: Decimal) -> None:
        """Bind a token with its initial balance and denormalized weight."""
        _require_amount("balance", balance)
        weight = Bfp.from_decimal(denorm).value

        def plan(state: PoolState) -> tuple[PoolState, None]:
            return bind_token(state, token, balance, weight, self.config), None

        self._execute("token_bound", plan)

    def rebind(self, token: str, balance: int, denorm: Decimal) -> None:
        """Change the balance and weight of a bound token."""
        _require_amount("balance", balance)
        weight = Bfp.from_decimal(denorm).value

        def plan(state: PoolState) -> tuple[PoolState, None]:
            return rebind_token(state, token, balance, weight, self.config), None

        self._execute("token_rebound", plan)

    def unbind(self, token: str) -> int:
        """Remove a token. Returns the balance released to the caller."""
        return self._execute("token_unbound", lambda state: unbind_token(state, token))

    def set_fees(
        self,
        swap_fee: Decimal | None = None,
        exit_fee: Decimal | None = None,
        reserve_ratio: Decimal | None = None,
    ) -> None:
        """Update any of the fee parameters in one commit.

        Omitted parameters stay unchanged. If any value is out of range none of
        them is applied.
        """

        def to_fixed(value: Decimal | None) -> int | None:
            return None if value is None else Bfp.from_decimal(value).value

        changes = {
            "swap_fee": to_fixed(swap_fee),
            "exit_fee": to_fixed(exit_fee),
            "reserve_ratio": to_fixed(reserve_ratio),
        }
        self._execute("fees_set", lambda state: (update_fees(state, **changes), None))

    def set_swap_fee(self, swap_fee: Decimal) -> None:
        self.set_fees(swap_fee=swap_fee)

    def set_exit_fee(self, exit_fee: Decimal) -> None:
        self.set_fees(exit_fee=exit_fee)

    def set_reserve_ratio(self, reserve_ratio: Decimal) -> None:
        self.set_fees(reserve_ratio=reserve_ratio)

    def finalize(self) -> int:
        """Freeze the configuration and mint the initial share supply.

        Returns:
            Shares minted
        """

        def plan(state: PoolState) -> tuple[PoolState, int]:
            new_state = finalize_state(state, self.config)
            return new_state, new_state.total_shares

        return self._execute("pool_finalized", plan)

    # =========================================================================
    # Reads
    # =========================================================================

    def is_finalized(self) -> bool:
        return self._state.is_finalized

    def is_bound(self, token: str) -> bool:
        return self._state.is_bound(token)

    def get_num_tokens(self) -> int:
        return self._state.num_tokens

    def get_current_tokens(self) -> tuple[str, ...]:
        return self._state.tokens

    def get_final_tokens(self) -> tuple[str, ...]:
        state = self._state
        require_finalized(state)
        return state.tokens

    def get_balance(self, token: str) -> int:
        state = self._state
        return state.balances[state.index_of(token)]

    def total_supply(self) -> int:
        return self._state.total_shares

    def get_denormalized_weight(self, token: str) -> Decimal:
        state = self._state
        return state.weight(state.index_of(token)).to_decimal()

    def get_total_denormalized_weight(self) -> Decimal:
        return Bfp(self._state.total_weight).to_decimal()

    def get_normalized_weight(self, token: str) -> Decimal:
        state = self._state
        return state.normalized_weight(state.index_of(token)).to_decimal()

    def get_swap_fee(self) -> Decimal:
        return self._state.fee().to_decimal()

    def get_exit_fee(self) -> Decimal:
        return self._state.exit_fee_bfp().to_decimal()

    def get_reserve_ratio(self) -> Decimal:
        return self._state.reserve_ratio_bfp().to_decimal()

    def get_collected_reserves(self, token: str) -> int:
        state = self._state
        return state.collected_reserves[state.index_of(token)]

    def get_spot_price(self, token_in: str, token_out: str) -> int:
        """Fee-free spot price of token_out in units of token_in."""
        return self._spot_price(self._state, token_in, token_out, Bfp(0)).value

    def get_spot_price_with_fee(self, token_in: str, token_out: str) -> int:
        """Fee-inclusive spot price, the marginal price bound for swaps."""
        state = self._state
        return self._spot_price(state, token_in, token_out, state.fee()).value

    def calc_invariant(self) -> Decimal:
        """Bonding-curve invariant V of the current balances."""
        state = self._state
        weights = [state.normalized_weight(i) for i in range(state.num_tokens)]
        balances = [state.balance(i) for i in range(state.num_tokens)]
        return calc_invariant(balances, weights)

    @staticmethod
    def _spot_price(state: PoolState, token_in: str, token_out: str, fee: Bfp) -> Bfp:
        i = state.index_of(token_in)
        o = state.index_of(token_out)
        return calc_spot_price(state.balance(i), state.weight(i), state.balance(o), state.weight(o), fee)

    # =========================================================================
    # Swaps
    # =========================================================================

    def _check_swap_prices(
        self,
        new_state: PoolState,
        i: int,
        o: int,
        spot_before: Bfp,
        amount_in: Bfp,
        amount_out: Bfp,
        max_price: int | None,
    ) -> Bfp:
        """Post-trade sanity and price-limit checks shared by both swap kinds."""
        spot_after = calc_spot_price(
            new_state.balance(i),
            new_state.weight(i),
            new_state.balance(o),
            new_state.weight(o),
            new_state.fee(),
        )
        if spot_after < spot_before:
            raise MathApproximationError(
                f"Spot price decreased from {spot_before.value} to {spot_after.value}"
            )
        if max_price is not None and spot_after.value > max_price:
            raise PriceLimitExceeded(f"Spot price after {spot_after.value} exceeds {max_price}")
        if spot_before > amount_in.div_up(amount_out):
            raise MathApproximationError(
                f"Effective price {amount_in.value}/{amount_out.value} below spot price {spot_before.value}"
            )
        return spot_after

    def swap_exact_amount_in(
        self,
        token_in: str,
        token_amount_in: int,
        token_out: str,
        min_amount_out: int = 0,
        max_price: int | None = None,
    ) -> SwapResult:
        """Sell an exact amount of token_in for as much token_out as the curve gives.

        Raises:
            NotFinalized: If the pool is not finalized
            InvalidToken: If either token is not bound
            MaxInRatioError: If token_amount_in exceeds MAX_IN_RATIO of the balance
            PriceLimitExceeded: If the spot price before or after exceeds max_price
            InsufficientOutput: If the output is below min_amount_out
            MathApproximationError: If a post-trade sanity check fails
        """
        _require_amount("token_amount_in", token_amount_in)
        _require_amount("min_amount_out", min_amount_out)

        def plan(state: PoolState) -> tuple[PoolState, SwapResult]:
            require_finalized(state)
            i = state.index_of(token_in)
            o = state.index_of(token_out)
            if i == o:
                raise ValueError("token_in and token_out must differ")

            balance_in, weight_in = state.balance(i), state.weight(i)
            balance_out, weight_out = state.balance(o), state.weight(o)
            fee = state.fee()
            amount_in = Bfp(token_amount_in)

            if amount_in > balance_in.mul_down(Bfp(self.config.max_in_ratio)):
                raise MaxInRatioError(f"Input {amount_in.value} exceeds max in ratio of {balance_in.value}")

            spot_before = calc_spot_price(balance_in, weight_in, balance_out, weight_out, fee)
            if max_price is not None and spot_before.value > max_price:
                raise PriceLimitExceeded(f"Spot price {spot_before.value} exceeds {max_price}")

            amount_out = calc_out_given_in(balance_in, weight_in, balance_out, weight_out, amount_in, fee)
            if amount_out.value < min_amount_out:
                raise InsufficientOutput(f"Output {amount_out.value} below minimum {min_amount_out}")

            reserve = skim_swap_in(amount_in, fee, state.reserve_ratio_bfp())
            delta = PoolDelta.pair(
                state.num_tokens,
                i,
                amount_in.value - reserve.reserve_amount,
                o,
                -amount_out.value,
                reserve_in=reserve.reserve_amount,
            )
            new_state = apply_delta(state, delta)
            spot_after = self._check_swap_prices(
                new_state, i, o, spot_before, amount_in, amount_out, max_price
            )

            return new_state, SwapResult(
                token_in=state.tokens[i],
                token_out=state.tokens[o],
                amount_in=amount_in.value,
                amount_out=amount_out.value,
                spot_price_before=spot_before.value,
                spot_price_after=spot_after.value,
                reserve_amount=reserve.reserve_amount,
            )

        return self._execute("swap_exact_amount_in", plan)

    def swap_exact_amount_out(
        self,
        token_in: str,
        max_amount_in: int | None,
        token_out: str,
        token_amount_out: int,
        max_price: int | None = None,
    ) -> SwapResult:
        """Buy an exact amount of token_out, paying whatever token_in the curve asks.

        Raises:
            NotFinalized: If the pool is not finalized
            InvalidToken: If either token is not bound
            MaxOutRatioError: If token_amount_out exceeds MAX_OUT_RATIO of the balance
            PriceLimitExceeded: If the spot price before or after exceeds max_price
            ExcessiveInput: If the required input is above max_amount_in
            MathApproximationError: If a post-trade sanity check fails
        """
        _require_amount("token_amount_out", token_amount_out)
        if max_amount_in is not None:
            _require_amount("max_amount_in", max_amount_in)

        def plan(state: PoolState) -> tuple[PoolState, SwapResult]:
            require_finalized(state)
            i = state.index_of(token_in)
            o = state.index_of(token_out)
            if i == o:
                raise ValueError("token_in and token_out must differ")

            balance_in, weight_in = state.balance(i), state.weight(i)
            balance_out, weight_out = state.balance(o), state.weight(o)
            fee = state.fee()
            amount_out = Bfp(token_amount_out)

            if amount_out > balance_out.mul_down(Bfp(self.config.max_out_ratio)):
                raise MaxOutRatioError(
                    f"Output {amount_out.value} exceeds max out ratio of {balance_out.value}"
                )

            spot_before = calc_spot_price(balance_in, weight_in, balance_out, weight_out, fee)
            if max_price is not None and spot_before.value > max_price:
                raise PriceLimitExceeded(f"Spot price {spot_before.value} exceeds {max_price}")

            amount_in = calc_in_given_out(balance_in, weight_in, balance_out, weight_out, amount_out, fee)
            if max_amount_in is not None and amount_in.value > max_amount_in:
                raise ExcessiveInput(f"Input {amount_in.value} above maximum {max_amount_in}")

            reserve = skim_swap_in(amount_in, fee, state.reserve_ratio_bfp())
            delta = PoolDelta.pair(
                state.num_tokens,
                i,
                amount_in.value - reserve.reserve_amount,
                o,
                -amount_out.value,
                reserve_in=reserve.reserve_amount,
            )
            new_state = apply_delta(state, delta)
            spot_after = self._check_swap_prices(
                new_state, i, o, spot_before, amount_in, amount_out, max_price
            )

            return new_state, SwapResult(
                token_in=state.tokens[i],
                token_out=state.tokens[o],
                amount_in=amount_in.value,
                amount_out=amount_out.value,
                spot_price_before=spot_before.value,
                spot_price_after=spot_after.value,
                reserve_amount=reserve.reserve_amount,
            )

        return self._execute("swap_exact_amount_out", plan)

    # =========================================================================
    # Proportional liquidity
    # =========================================================================

    def join_pool(self, pool_amount_out: int, max_amounts_in: Sequence[int] | None = None) -> LiquidityResult:
        """Mint shares by depositing every token in proportion to its balance.

        Raises:
            NotFinalized: If the pool is not finalized
            MathApproximationError: If the share ratio or a token amount rounds to zero
            LimitExceeded: If a token amount exceeds its entry in max_amounts_in
        """
        _require_amount("pool_amount_out", pool_amount_out)

        def plan(state: PoolState) -> tuple[PoolState, LiquidityResult]:
            require_finalized(state)
            _require_bounds("max_amounts_in", max_amounts_in, state.num_tokens)

            ratio = Bfp(pool_amount_out).div_up(state.supply())
            if ratio.is_zero():
                raise MathApproximationError("Join ratio rounds to zero")

            amounts = []
            for index, token in enumerate(state.tokens):
                amount_in = state.balance(index).mul_up(ratio)
                if amount_in.is_zero():
                    raise MathApproximationError(f"Amount of {token} rounds to zero")
                if max_amounts_in is not None and amount_in.value > max_amounts_in[index]:
                    raise LimitExceeded(
                        f"Amount of {token} {amount_in.value} above maximum {max_amounts_in[index]}"
                    )
                amounts.append(amount_in.value)

            delta = PoolDelta(tuple(amounts), shares_delta=pool_amount_out)
            return apply_delta(state, delta), LiquidityResult(pool_amount_out, tuple(amounts))

        return self._execute("join_pool", plan)

    def exit_pool(self, pool_amount_in: int, min_amounts_out: Sequence[int] | None = None) -> LiquidityResult:
        """Burn shares and withdraw every token in proportion to its balance.

        The exit fee reduces the payout; all of pool_amount_in is burned.

        Raises:
            NotFinalized: If the pool is not finalized
            Underflow: If pool_amount_in exceeds the share supply
            MathApproximationError: If the share ratio or a token amount rounds to zero
            LimitExceeded: If a token amount is below its entry in min_amounts_out
        """
        _require_amount("pool_amount_in", pool_amount_in)

        def plan(state: PoolState) -> tuple[PoolState, LiquidityResult]:
            require_finalized(state)
            _require_bounds("min_amounts_out", min_amounts_out, state.num_tokens)

            supply = state.supply()
            shares_in = Bfp(pool_amount_in)
            # raises Underflow when burning more than the supply
            supply.sub(shares_in)

            shares_after_fee = shares_in.mul_down(state.exit_fee_bfp().complement())
            ratio = shares_after_fee.div_down(supply)
            if ratio.is_zero():
                raise MathApproximationError("Exit ratio rounds to zero")

            amounts = []
            for index, token in enumerate(state.tokens):
                amount_out = state.balance(index).mul_down(ratio)
                if amount_out.is_zero():
                    raise MathApproximationError(f"Amount of {token} rounds to zero")
                if min_amounts_out is not None and amount_out.value < min_amounts_out[index]:
                    raise LimitExceeded(
                        f"Amount of {token} {amount_out.value} below minimum {min_amounts_out[index]}"
                    )
                amounts.append(amount_out.value)

            delta = PoolDelta(tuple(-a for a in amounts), shares_delta=-pool_amount_in)
            return apply_delta(state, delta), LiquidityResult(pool_amount_in, tuple(amounts))

        return self._execute("exit_pool", plan)

    # =========================================================================
    # Single-sided liquidity
    # =========================================================================

    def joinswap_extern_amount_in(
        self, token_in: str, token_amount_in: int, min_pool_amount_out: int = 0
    ) -> SingleSidedResult:
        """Deposit an exact amount of one token and mint the shares it is worth.

        Raises:
            NotFinalized: If the pool is not finalized
            InvalidToken: If the token is not bound
            MaxInRatioError: If token_amount_in exceeds MAX_IN_RATIO of the balance
            LimitExceeded: If fewer than min_pool_amount_out shares would be minted
        """
        _require_amount("token_amount_in", token_amount_in)
        _require_amount("min_pool_amount_out", min_pool_amount_out)

        def plan(state: PoolState) -> tuple[PoolState, SingleSidedResult]:
            require_finalized(state)
            i = state.index_of(token_in)
            balance_in = state.balance(i)
            weight_in = state.normalized_weight(i)
            amount_in = Bfp(token_amount_in)

            if amount_in > balance_in.mul_down(Bfp(self.config.max_in_ratio)):
                raise MaxInRatioError(f"Input {amount_in.value} exceeds max in ratio of {balance_in.value}")

            pool_amount_out = calc_pool_out_given_single_in(
                balance_in, weight_in, state.supply(), amount_in, state.fee()
            )
            if pool_amount_out.value < min_pool_amount_out:
                raise LimitExceeded(
                    f"Shares out {pool_amount_out.value} below minimum {min_pool_amount_out}"
                )

            reserve = skim_single_in(amount_in, weight_in, state.fee(), state.reserve_ratio_bfp())
            delta = PoolDelta.single(
                state.num_tokens,
                i,
                amount_in.value - reserve.reserve_amount,
                shares_delta=pool_amount_out.value,
                reserve_amount=reserve.reserve_amount,
            )
            return apply_delta(state, delta), SingleSidedResult(
                token=state.tokens[i],
                token_amount=amount_in.value,
                pool_amount=pool_amount_out.value,
                reserve_amount=reserve.reserve_amount,
            )

        return self._execute("joinswap_extern_amount_in", plan)

    def joinswap_pool_amount_out(
        self, token_in: str, pool_amount_out: int, max_amount_in: int | None = None
    ) -> SingleSidedResult:
        """Mint an exact number of shares by depositing one token.

        Raises:
            NotFinalized: If the pool is not finalized
            InvalidToken: If the token is not bound
            MathApproximationError: If the required deposit rounds to zero
            LimitExceeded: If the deposit is above max_amount_in
            MaxInRatioError: If the deposit exceeds MAX_IN_RATIO of the balance
        """
        _require_amount("pool_amount_out", pool_amount_out)
        if max_amount_in is not None:
            _require_amount("max_amount_in", max_amount_in)

        def plan(state: PoolState) -> tuple[PoolState, SingleSidedResult]:
            require_finalized(state)
            i = state.index_of(token_in)
            balance_in = state.balance(i)
            weight_in = state.normalized_weight(i)
            shares_out = Bfp(pool_amount_out)

            amount_in = calc_single_in_given_pool_out(
                balance_in, weight_in, state.supply(), shares_out, state.fee()
            )
            if amount_in.is_zero():
                raise MathApproximationError("Deposit rounds to zero")
            if max_amount_in is not None and amount_in.value > max_amount_in:
                raise LimitExceeded(f"Deposit {amount_in.value} above maximum {max_amount_in}")
            if amount_in > balance_in.mul_down(Bfp(self.config.max_in_ratio)):
                raise MaxInRatioError(f"Input {amount_in.value} exceeds max in ratio of {balance_in.value}")

            amount_in_without_fee = calc_single_in_given_pool_out(
                balance_in, weight_in, state.supply(), shares_out, Bfp(0)
            )
            reserve = skim(amount_in, amount_in_without_fee, state.reserve_ratio_bfp())
            delta = PoolDelta.single(
                state.num_tokens,
                i,
                amount_in.value - reserve.reserve_amount,
                shares_delta=pool_amount_out,
                reserve_amount=reserve.reserve_amount,
            )
            return apply_delta(state, delta), SingleSidedResult(
                token=state.tokens[i],
                token_amount=amount_in.value,
                pool_amount=pool_amount_out,
                reserve_amount=reserve.reserve_amount,
            )

        return self._execute("joinswap_pool_amount_out", plan)

    def exitswap_pool_amount_in(
        self, token_out: str, pool_amount_in: int, min_amount_out: int = 0
    ) -> SingleSidedResult:
        """Burn an exact number of shares and withdraw one token.

        Raises:
            NotFinalized: If the pool is not finalized
            InvalidToken: If the token is not bound
            LimitExceeded: If the withdrawal is below min_amount_out
            MaxOutRatioError: If the withdrawal plus its reserve exceeds MAX_OUT_RATIO of the balance
            Underflow: If pool_amount_in exceeds the share supply
        """
        _require_amount("pool_amount_in", pool_amount_in)
        _require_amount("min_amount_out", min_amount_out)

        def plan(state: PoolState) -> tuple[PoolState, SingleSidedResult]:
            require_finalized(state)
            o = state.index_of(token_out)
            balance_out = state.balance(o)
            weight_out = state.normalized_weight(o)
            shares_in = Bfp(pool_amount_in)

            amount_out = calc_single_out_given_pool_in(
                balance_out, weight_out, state.supply(), shares_in, state.fee(), state.exit_fee_bfp()
            )
            if amount_out.value < min_amount_out:
                raise LimitExceeded(f"Withdrawal {amount_out.value} below minimum {min_amount_out}")

            amount_out_without_fee = calc_single_out_given_pool_in(
                balance_out, weight_out, state.supply(), shares_in, Bfp(0), state.exit_fee_bfp()
            )
            reserve = skim(amount_out, amount_out_without_fee, state.reserve_ratio_bfp())
            outflow = amount_out.value + reserve.reserve_amount
            if outflow > balance_out.mul_down(Bfp(self.config.max_out_ratio)).value:
                raise MaxOutRatioError(f"Outflow {outflow} exceeds max out ratio of {balance_out.value}")

            delta = PoolDelta.single(
                state.num_tokens,
                o,
                -outflow,
                shares_delta=-pool_amount_in,
                reserve_amount=reserve.reserve_amount,
            )
            return apply_delta(state, delta), SingleSidedResult(
                token=state.tokens[o],
                token_amount=amount_out.value,
                pool_amount=pool_amount_in,
                reserve_amount=reserve.reserve_amount,
            )

        return self._execute("exitswap_pool_amount_in", plan)

    def exitswap_extern_amount_out(
        self, token_out: str, token_amount_out: int, max_pool_amount_in: int | None = None
    ) -> SingleSidedResult:
        """Withdraw an exact amount of one token, burning the shares it costs.

        Raises:
            NotFinalized: If the pool is not finalized
            InvalidToken: If the token is not bound
            MaxOutRatioError: If token_amount_out plus its reserve exceeds MAX_OUT_RATIO of the balance
            MathApproximationError: If the shares to burn round to zero
            LimitExceeded: If more than max_pool_amount_in shares would be burned
        """
        _require_amount("token_amount_out", token_amount_out)
        if max_pool_amount_in is not None:
            _require_amount("max_pool_amount_in", max_pool_amount_in)

        def plan(state: PoolState) -> tuple[PoolState, SingleSidedResult]:
            require_finalized(state)
            o = state.index_of(token_out)
            balance_out = state.balance(o)
            weight_out = state.normalized_weight(o)
            amount_out = Bfp(token_amount_out)

            reserve = skim_single_out(amount_out, weight_out, state.fee(), state.reserve_ratio_bfp())
            outflow = amount_out.value + reserve.reserve_amount
            if outflow > balance_out.mul_down(Bfp(self.config.max_out_ratio)).value:
                raise MaxOutRatioError(f"Outflow {outflow} exceeds max out ratio of {balance_out.value}")

            pool_amount_in = calc_pool_in_given_single_out(
                balance_out, weight_out, state.supply(), amount_out, state.fee(), state.exit_fee_bfp()
            )
            if pool_amount_in.is_zero():
                raise MathApproximationError("Shares to burn round to zero")
            if max_pool_amount_in is not None and pool_amount_in.value > max_pool_amount_in:
                raise LimitExceeded(
                    f"Shares in {pool_amount_in.value} above maximum {max_pool_amount_in}"
                )

            delta = PoolDelta.single(
                state.num_tokens,
                o,
                -outflow,
                shares_delta=-pool_amount_in.value,
                reserve_amount=reserve.reserve_amount,
            )
            return apply_delta(state, delta), SingleSidedResult(
                token=state.tokens[o],
                token_amount=amount_out.value,
                pool_amount=pool_amount_in.value,
                reserve_amount=reserve.reserve_amount,
            )

        return self._execute("exitswap_extern_amount_out", plan)
