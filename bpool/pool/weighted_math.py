"""Weighted pool math.

Closed-form pricing functions for weighted product pools. Every function is
pure: it takes fixed-point balances, weights and fees and returns a
fixed-point amount. Rounding always favours the pool: amounts paid out and
shares minted round down, amounts paid in and shares burned round up.

Swap functions take denormalized weights (only their ratio matters); the
single-sided functions take the token's normalized weight.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal, localcontext

from bpool.math.fixed_point import Bfp, Underflow

from .errors import InvalidWeightError, ZeroBalanceError


def _require_positive(name: str, value: Bfp) -> None:
    if value.value <= 0:
        raise ZeroBalanceError(f"{name} must be positive")


def _require_weight(name: str, value: Bfp) -> None:
    if value.value <= 0:
        raise InvalidWeightError(f"{name} must be positive")


def calc_single_sided_fee(normalized_weight: Bfp, swap_fee: Bfp) -> Bfp:
    """Effective fee of a single-sided join or exit.

    Only the part of the deposit that is implicitly swapped into the other
    tokens pays the swap fee:

        zaz = (1 - normalized_weight) * swap_fee

    Rounded up, so the fee never undercharges.
    """
    return normalized_weight.complement().mul_up(swap_fee)


def calc_spot_price(
    balance_in: Bfp,
    weight_in: Bfp,
    balance_out: Bfp,
    weight_out: Bfp,
    swap_fee: Bfp,
) -> Bfp:
    """Calculate the marginal price of token_out in units of token_in.

    Formula:
        spot_price = (balance_in / weight_in) / (balance_out / weight_out) * 1 / (1 - swap_fee)

    Pass ``swap_fee = Bfp(0)`` for the fee-free price.
    """
    _require_weight("weight_in", weight_in)
    _require_weight("weight_out", weight_out)
    _require_positive("balance_out", balance_out)

    numer = balance_in.div_up(weight_in)
    denom = balance_out.div_down(weight_out)
    ratio = numer.div_up(denom)
    scale = Bfp.one().div_up(swap_fee.complement())
    return ratio.mul_up(scale)


def calc_out_given_in(
    balance_in: Bfp,
    weight_in: Bfp,
    balance_out: Bfp,
    weight_out: Bfp,
    amount_in: Bfp,
    swap_fee: Bfp,
) -> Bfp:
    """Calculate output amount for a given input (sell side).

    Formula:
        amount_out = balance_out * (1 - (balance_in / (balance_in + amount_in * (1 - swap_fee)))^(weight_in / weight_out))

    Args:
        balance_in: Balance of input token (must be positive)
        weight_in: Denormalized weight of input token (must be positive)
        balance_out: Balance of output token (must be positive)
        weight_out: Denormalized weight of output token (must be positive)
        amount_in: Input amount, fee included
        swap_fee: Swap fee fraction

    Returns:
        Output amount (rounded down)

    Raises:
        InvalidWeightError: If weight_in or weight_out is zero
        ZeroBalanceError: If balance_in or balance_out is zero
    """
    _require_weight("weight_in", weight_in)
    _require_weight("weight_out", weight_out)
    _require_positive("balance_in", balance_in)
    _require_positive("balance_out", balance_out)

    weight_ratio = weight_in.div_down(weight_out)
    adjusted_in = amount_in.mul_down(swap_fee.complement())

    # base = balance_in / (balance_in + adjusted_in), rounded up so the output shrinks
    base = balance_in.div_up(balance_in.add(adjusted_in))
    power = base.pow(weight_ratio)

    return balance_out.mul_down(power.complement())


def calc_in_given_out(
    balance_in: Bfp,
    weight_in: Bfp,
    balance_out: Bfp,
    weight_out: Bfp,
    amount_out: Bfp,
    swap_fee: Bfp,
) -> Bfp:
    """Calculate input amount for a given output (buy side).

    Formula:
        amount_in = balance_in * ((balance_out / (balance_out - amount_out))^(weight_out / weight_in) - 1) / (1 - swap_fee)

    Args:
        balance_in: Balance of input token (must be positive)
        weight_in: Denormalized weight of input token (must be positive)
        balance_out: Balance of output token (must be positive)
        weight_out: Denormalized weight of output token (must be positive)
        amount_out: Requested output amount
        swap_fee: Swap fee fraction

    Returns:
        Input amount including fee (rounded up)

    Raises:
        InvalidWeightError: If weight_in or weight_out is zero
        ZeroBalanceError: If balance_in or balance_out is zero
        Underflow: If amount_out >= balance_out
    """
    _require_weight("weight_in", weight_in)
    _require_weight("weight_out", weight_out)
    _require_positive("balance_in", balance_in)
    _require_positive("balance_out", balance_out)

    if amount_out.value >= balance_out.value:
        raise Underflow("amount_out must be less than balance_out")

    # exponent rounded UP for buy orders (differs from calc_out_given_in)
    weight_ratio = weight_out.div_up(weight_in)
    base = balance_out.div_up(balance_out.sub(amount_out))
    power = base.pow(weight_ratio)

    amount_in_without_fee = balance_in.mul_up(power.sub(Bfp.one()))
    return amount_in_without_fee.div_up(swap_fee.complement())


def calc_pool_out_given_single_in(
    balance_in: Bfp,
    normalized_weight_in: Bfp,
    pool_supply: Bfp,
    amount_in: Bfp,
    swap_fee: Bfp,
) -> Bfp:
    """Calculate shares minted for a single-token deposit.

    Formula:
        pool_amount_out = pool_supply * ((1 + amount_in * (1 - zaz) / balance_in)^normalized_weight_in - 1)
        zaz = (1 - normalized_weight_in) * swap_fee

    Returns:
        Shares minted (rounded down)
    """
    _require_weight("normalized_weight_in", normalized_weight_in)
    _require_positive("balance_in", balance_in)
    _require_positive("pool_supply", pool_supply)

    zaz = calc_single_sided_fee(normalized_weight_in, swap_fee)
    amount_in_after_fee = amount_in.mul_down(zaz.complement())

    new_balance_in = balance_in.add(amount_in_after_fee)
    token_in_ratio = new_balance_in.div_down(balance_in)

    pool_ratio = token_in_ratio.pow(normalized_weight_in)
    new_pool_supply = pool_ratio.mul_down(pool_supply)
    return new_pool_supply.sub(pool_supply)


def calc_single_in_given_pool_out(
    balance_in: Bfp,
    normalized_weight_in: Bfp,
    pool_supply: Bfp,
    pool_amount_out: Bfp,
    swap_fee: Bfp,
) -> Bfp:
    """Calculate the single-token deposit needed to mint a number of shares.

    Formula:
        amount_in = balance_in * (((pool_supply + pool_amount_out) / pool_supply)^(1 / normalized_weight_in) - 1) / (1 - zaz)

    Returns:
        Token amount in, fee included (rounded up)
    """
    _require_weight("normalized_weight_in", normalized_weight_in)
    _require_positive("balance_in", balance_in)
    _require_positive("pool_supply", pool_supply)

    new_pool_supply = pool_supply.add(pool_amount_out)
    pool_ratio = new_pool_supply.div_up(pool_supply)

    exponent = Bfp.one().div_up(normalized_weight_in)
    token_in_ratio = pool_ratio.pow(exponent)
    new_balance_in = token_in_ratio.mul_up(balance_in)
    amount_in_after_fee = new_balance_in.sub(balance_in)

    zar = calc_single_sided_fee(normalized_weight_in, swap_fee)
    return amount_in_after_fee.div_up(zar.complement())


def calc_single_out_given_pool_in(
    balance_out: Bfp,
    normalized_weight_out: Bfp,
    pool_supply: Bfp,
    pool_amount_in: Bfp,
    swap_fee: Bfp,
    exit_fee: Bfp,
) -> Bfp:
    """Calculate the single-token withdrawal for burning a number of shares.

    Formula:
        amount_out = balance_out * (1 - ((pool_supply - pool_amount_in * (1 - exit_fee)) / pool_supply)^(1 / normalized_weight_out)) * (1 - zaz)

    Returns:
        Token amount out, fee deducted (rounded down)
    """
    _require_weight("normalized_weight_out", normalized_weight_out)
    _require_positive("balance_out", balance_out)
    _require_positive("pool_supply", pool_supply)

    pool_amount_in_after_exit_fee = pool_amount_in.mul_down(exit_fee.complement())
    new_pool_supply = pool_supply.sub(pool_amount_in_after_exit_fee)
    pool_ratio = new_pool_supply.div_up(pool_supply)

    exponent = Bfp.one().div_down(normalized_weight_out)
    token_out_ratio = pool_ratio.pow(exponent)
    new_balance_out = token_out_ratio.mul_up(balance_out)
    amount_out_before_fee = balance_out.sub(new_balance_out)

    zaz = calc_single_sided_fee(normalized_weight_out, swap_fee)
    return amount_out_before_fee.mul_down(zaz.complement())


def calc_pool_in_given_single_out(
    balance_out: Bfp,
    normalized_weight_out: Bfp,
    pool_supply: Bfp,
    amount_out: Bfp,
    swap_fee: Bfp,
    exit_fee: Bfp,
) -> Bfp:
    """Calculate shares to burn for an exact single-token withdrawal.

    Formula:
        pool_amount_in = pool_supply * (1 - ((balance_out - amount_out / (1 - zaz)) / balance_out)^normalized_weight_out) / (1 - exit_fee)

    Returns:
        Shares burned, exit fee included (rounded up)
    """
    _require_weight("normalized_weight_out", normalized_weight_out)
    _require_positive("balance_out", balance_out)
    _require_positive("pool_supply", pool_supply)

    zar = calc_single_sided_fee(normalized_weight_out, swap_fee)
    amount_out_before_fee = amount_out.div_up(zar.complement())

    new_balance_out = balance_out.sub(amount_out_before_fee)
    token_out_ratio = new_balance_out.div_down(balance_out)

    pool_ratio = token_out_ratio.pow(normalized_weight_out)
    new_pool_supply = pool_ratio.mul_down(pool_supply)
    pool_amount_in_after_exit_fee = pool_supply.sub(new_pool_supply)

    return pool_amount_in_after_exit_fee.div_up(exit_fee.complement())


def calc_invariant(balances: Sequence[Bfp], normalized_weights: Sequence[Bfp]) -> Decimal:
    """Calculate the bonding-curve invariant V = prod(balance_i ^ weight_i).

    Balances are far outside the (0, 2) domain of ``bpow``, so this read-only
    metric is evaluated with 50-digit Decimal logarithms. Tokens are visited in
    bind order.

    Raises:
        ValueError: If the sequences differ in length
        ZeroBalanceError: If any balance is zero
    """
    if len(balances) != len(normalized_weights):
        raise ValueError("balances and normalized_weights must have the same length")

    with localcontext() as ctx:
        ctx.prec = 50
        log_sum = Decimal(0)
        for balance, weight in zip(balances, normalized_weights):
            _require_positive("balance", balance)
            log_sum += balance.to_decimal().ln() * weight.to_decimal()
        return +log_sum.exp()
