"""Tests for the protocol reserve skim."""

from bpool.math.fixed_point import Bfp
from bpool.pool.reserves import (
    ReserveSkim,
    calc_reserve_amount,
    effective_lp_fee,
    skim,
    skim_single_in,
    skim_single_out,
    skim_swap_in,
)
from tests.helpers import to_wei


def bfp(value: str) -> Bfp:
    return Bfp(to_wei(value))


class TestCalcReserveAmount:
    def test_half_of_fee(self) -> None:
        reserve = calc_reserve_amount(bfp("100.2"), bfp("100"), bfp("0.5"))
        assert reserve.value == to_wei("0.1")

    def test_direction_does_not_matter(self) -> None:
        inflow = calc_reserve_amount(bfp("10"), bfp("9"), bfp("0.25"))
        outflow = calc_reserve_amount(bfp("9"), bfp("10"), bfp("0.25"))
        assert inflow == outflow

    def test_zero_ratio_diverts_nothing(self) -> None:
        assert calc_reserve_amount(bfp("10"), bfp("9"), Bfp(0)).is_zero()

    def test_full_ratio_diverts_whole_fee(self) -> None:
        assert calc_reserve_amount(bfp("10"), bfp("9"), Bfp.one()) == bfp("1")

    def test_rounds_down(self) -> None:
        assert calc_reserve_amount(Bfp(3), Bfp(0), bfp("0.5")).value == 1


class TestSkims:
    def test_skim_record(self) -> None:
        record = skim(bfp("12"), bfp("10"), bfp("0.5"))
        assert record == ReserveSkim(to_wei("12"), to_wei("10"), to_wei("1"))
        assert record.fee_amount == to_wei("2")

    def test_swap_skim(self) -> None:
        """Reserve of a swap is amount_in * fee * ratio."""
        record = skim_swap_in(bfp("500"), bfp("0.001"), bfp("0.5"))
        assert record.amount_without_fee == to_wei("499.5")
        assert record.reserve_amount == to_wei("0.25")

    def test_single_in_skim_uses_single_sided_fee(self) -> None:
        # zaz = (1 - 0.02) * 0.001 = 0.00098
        record = skim_single_in(bfp("1000"), bfp("0.02"), bfp("0.001"), bfp("0.5"))
        assert record.amount_without_fee == to_wei("999.02")
        assert record.reserve_amount == to_wei("0.49")

    def test_single_out_skim_grosses_up(self) -> None:
        # zaz = (1 - 0.5) * 0.002 = 0.001
        record = skim_single_out(bfp("999"), bfp("0.5"), bfp("0.002"), bfp("1"))
        assert record.amount_without_fee == to_wei("1000")
        assert record.reserve_amount == to_wei("1")

    def test_fee_free_pool_has_no_reserve(self) -> None:
        assert skim_swap_in(bfp("500"), Bfp(0), bfp("0.5")).reserve_amount == 0


class TestEffectiveLpFee:
    def test_split(self) -> None:
        assert effective_lp_fee(bfp("0.003"), bfp("0.2")) == bfp("0.0024")

    def test_full_reserve_leaves_nothing(self) -> None:
        assert effective_lp_fee(bfp("0.003"), Bfp.one()).is_zero()
