"""Protocol reserve skim.

A fraction of every fee-bearing flow leaves the pool for the protocol
reserve instead of compounding into the pool balance. The fee-bearing part is
the gap between what the caller pays (or receives) with the swap fee and what
the same operation would move without it:

    reserve = |amount_with_fee - amount_without_fee| * reserve_ratio

Inflows are credited as ``amount - reserve``; outflows are debited as
``amount + reserve``. With ``reserve_ratio = 0`` nothing is diverted.
"""

from __future__ import annotations

from dataclasses import dataclass

from bpool.math.fixed_point import Bfp

from .weighted_math import calc_single_sided_fee


@dataclass(frozen=True)
class ReserveSkim:
    """Reserve diversion computed for one token flow.

    Attributes:
        amount_with_fee: Amount the caller pays or receives
        amount_without_fee: Same flow had no swap fee applied
        reserve_amount: Part of the fee diverted to the protocol reserve
    """

    amount_with_fee: int
    amount_without_fee: int
    reserve_amount: int

    @property
    def fee_amount(self) -> int:
        """Total fee carried by the flow (reserve part included)."""
        return abs(self.amount_with_fee - self.amount_without_fee)


def calc_reserve_amount(amount_with_fee: Bfp, amount_without_fee: Bfp, reserve_ratio: Bfp) -> Bfp:
    """Calculate the reserve diverted from a fee-bearing flow (rounded down)."""
    return amount_with_fee.abs_diff(amount_without_fee).mul_down(reserve_ratio)


def skim(amount_with_fee: Bfp, amount_without_fee: Bfp, reserve_ratio: Bfp) -> ReserveSkim:
    """Build the ReserveSkim record for a flow."""
    reserve = calc_reserve_amount(amount_with_fee, amount_without_fee, reserve_ratio)
    return ReserveSkim(
        amount_with_fee=amount_with_fee.value,
        amount_without_fee=amount_without_fee.value,
        reserve_amount=reserve.value,
    )


def skim_swap_in(amount_in: Bfp, swap_fee: Bfp, reserve_ratio: Bfp) -> ReserveSkim:
    """Skim for a two-sided swap: the fee-free input is amount_in * (1 - swap_fee)."""
    without_fee = amount_in.mul_down(swap_fee.complement())
    return skim(amount_in, without_fee, reserve_ratio)


def skim_single_in(
    amount_in: Bfp, normalized_weight: Bfp, swap_fee: Bfp, reserve_ratio: Bfp
) -> ReserveSkim:
    """Skim for an exact single-sided deposit: fee-free input is amount_in * (1 - zaz)."""
    zaz = calc_single_sided_fee(normalized_weight, swap_fee)
    without_fee = amount_in.mul_down(zaz.complement())
    return skim(amount_in, without_fee, reserve_ratio)


def skim_single_out(
    amount_out: Bfp, normalized_weight: Bfp, swap_fee: Bfp, reserve_ratio: Bfp
) -> ReserveSkim:
    """Skim for an exact single-sided withdrawal: fee-free output is amount_out / (1 - zaz)."""
    zaz = calc_single_sided_fee(normalized_weight, swap_fee)
    without_fee = amount_out.div_up(zaz.complement())
    return skim(amount_out, without_fee, reserve_ratio)


def effective_lp_fee(swap_fee: Bfp, reserve_ratio: Bfp) -> Bfp:
    """Fee rate that compounds for liquidity providers: swap_fee * (1 - reserve_ratio)."""
    return swap_fee.mul_down(reserve_ratio.complement())
