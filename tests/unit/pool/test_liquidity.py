"""Tests for proportional and single-sided liquidity operations."""

from decimal import Decimal

import pytest

from bpool import WeightedPool
from bpool.constants import MAX_OUT_RATIO
from bpool.math.fixed_point import Underflow
from bpool.pool.errors import (
    LimitExceeded,
    MathApproximationError,
    MaxInRatioError,
    MaxOutRatioError,
    NotFinalized,
    ZeroBalanceError,
)
from tests.helpers import DAI, ERROR_DELTA, MKR, ONE, WETH, calc_relative_diff, from_wei, make_pool, to_wei
from tests.helpers import reference_math as ref

FEE = Decimal("0.003")
RATIO = Decimal("0.2")


class TestJoinPool:
    def test_join_mints_proportionally(self, extreme_pool: WeightedPool) -> None:
        result = extreme_pool.join_pool(ONE)

        assert result.pool_amount == ONE
        assert result.token_amounts == (to_wei("10"), to_wei("10"))
        assert extreme_pool.total_supply() == 101 * ONE
        assert extreme_pool.get_balance(WETH) == to_wei("1010")
        assert extreme_pool.get_balance(DAI) == to_wei("1010")

    def test_join_charges_no_reserve(self, extreme_pool: WeightedPool) -> None:
        extreme_pool.join_pool(ONE)
        assert extreme_pool.get_collected_reserves(WETH) == 0

    def test_max_amounts_in(self, extreme_pool: WeightedPool) -> None:
        before = extreme_pool.state
        with pytest.raises(LimitExceeded):
            extreme_pool.join_pool(ONE, [to_wei("10"), to_wei("10") - 1])
        assert extreme_pool.state is before

    def test_bound_vector_length(self, extreme_pool: WeightedPool) -> None:
        with pytest.raises(ValueError):
            extreme_pool.join_pool(ONE, [to_wei("10")])

    def test_zero_shares(self, extreme_pool: WeightedPool) -> None:
        with pytest.raises(MathApproximationError):
            extreme_pool.join_pool(0)

    def test_not_finalized(self, unfinalized_pool: WeightedPool) -> None:
        with pytest.raises(NotFinalized):
            unfinalized_pool.join_pool(ONE)


class TestExitPool:
    def test_join_then_exit_restores_balances(self, extreme_pool: WeightedPool) -> None:
        extreme_pool.join_pool(ONE)
        result = extreme_pool.exit_pool(ONE, [0, 0])

        assert extreme_pool.total_supply() == 100 * ONE
        for amount in result.token_amounts:
            assert calc_relative_diff(Decimal(10), from_wei(amount)) <= ERROR_DELTA
        assert calc_relative_diff(Decimal(1000), from_wei(extreme_pool.get_balance(WETH))) <= ERROR_DELTA

    def test_exit_fee_reduces_payout_and_burns_all_shares(self) -> None:
        pool = make_pool({WETH: ("100", "5"), DAI: ("400", "5")}, exit_fee="0.01")
        result = pool.exit_pool(10 * ONE)

        assert pool.total_supply() == 90 * ONE
        assert result.token_amounts == (to_wei("9.9"), to_wei("39.6"))

    def test_min_amounts_out(self, extreme_pool: WeightedPool) -> None:
        with pytest.raises(LimitExceeded):
            extreme_pool.exit_pool(ONE, [to_wei("10") + 1, 0])

    def test_more_than_supply(self, extreme_pool: WeightedPool) -> None:
        with pytest.raises(Underflow):
            extreme_pool.exit_pool(100 * ONE + 1)

    def test_zero_shares(self, extreme_pool: WeightedPool) -> None:
        with pytest.raises(MathApproximationError):
            extreme_pool.exit_pool(0)

    def test_full_exit_would_empty_pool(self, extreme_pool: WeightedPool) -> None:
        before = extreme_pool.state
        with pytest.raises(ZeroBalanceError):
            extreme_pool.exit_pool(100 * ONE)
        assert extreme_pool.state is before


class TestJoinswapExternAmountIn:
    def test_matches_reference(self, balanced_pool: WeightedPool) -> None:
        result = balanced_pool.joinswap_extern_amount_in(WETH, to_wei("10"))

        expected = ref.pool_out_given_single_in(100, Decimal(1) / 3, 100, 10, FEE)
        assert calc_relative_diff(expected, from_wei(result.pool_amount)) <= ERROR_DELTA
        assert balanced_pool.total_supply() == 100 * ONE + result.pool_amount

    def test_reserve_credit(self, balanced_pool: WeightedPool) -> None:
        result = balanced_pool.joinswap_extern_amount_in(WETH, to_wei("10"))

        zaz = (1 - Decimal(1) / 3) * FEE
        expected_reserve = ref.reserves(10, 10 * (1 - zaz), RATIO)
        assert calc_relative_diff(expected_reserve, from_wei(result.reserve_amount)) <= ERROR_DELTA
        assert balanced_pool.get_balance(WETH) == to_wei("110") - result.reserve_amount
        assert balanced_pool.get_collected_reserves(WETH) == result.reserve_amount

    def test_min_pool_amount_out(self, balanced_pool: WeightedPool) -> None:
        with pytest.raises(LimitExceeded):
            balanced_pool.joinswap_extern_amount_in(WETH, to_wei("10"), min_pool_amount_out=4 * ONE)

    def test_max_in_ratio(self, balanced_pool: WeightedPool) -> None:
        with pytest.raises(MaxInRatioError):
            balanced_pool.joinswap_extern_amount_in(WETH, to_wei("50") + 1)


class TestJoinswapPoolAmountOut:
    def test_matches_reference(self, balanced_pool: WeightedPool) -> None:
        result = balanced_pool.joinswap_pool_amount_out(MKR, ONE)

        expected = ref.single_in_given_pool_out(500, Decimal(1) / 3, 100, 1, FEE)
        assert calc_relative_diff(expected, from_wei(result.token_amount)) <= ERROR_DELTA
        assert result.pool_amount == ONE
        assert balanced_pool.total_supply() == 101 * ONE

    def test_reserve_uses_fee_free_quote(self, balanced_pool: WeightedPool) -> None:
        result = balanced_pool.joinswap_pool_amount_out(MKR, ONE)

        with_fee = ref.single_in_given_pool_out(500, Decimal(1) / 3, 100, 1, FEE)
        without_fee = ref.single_in_given_pool_out(500, Decimal(1) / 3, 100, 1, 0)
        expected_reserve = ref.reserves(with_fee, without_fee, RATIO)
        assert calc_relative_diff(expected_reserve, from_wei(result.reserve_amount)) <= Decimal("1e-6")
        assert balanced_pool.get_balance(MKR) == to_wei("500") + result.token_amount - result.reserve_amount

    def test_max_amount_in(self, balanced_pool: WeightedPool) -> None:
        with pytest.raises(LimitExceeded):
            balanced_pool.joinswap_pool_amount_out(MKR, ONE, max_amount_in=to_wei("15"))

    def test_max_in_ratio(self, balanced_pool: WeightedPool) -> None:
        with pytest.raises(MaxInRatioError):
            balanced_pool.joinswap_pool_amount_out(MKR, 20 * ONE)

    def test_zero_shares(self, balanced_pool: WeightedPool) -> None:
        with pytest.raises(MathApproximationError):
            balanced_pool.joinswap_pool_amount_out(MKR, 0)


class TestExitswapPoolAmountIn:
    def test_matches_reference(self, balanced_pool: WeightedPool) -> None:
        result = balanced_pool.exitswap_pool_amount_in(DAI, ONE)

        expected = ref.single_out_given_pool_in(200000, Decimal(1) / 3, 100, 1, FEE, 0)
        assert calc_relative_diff(expected, from_wei(result.token_amount)) <= ERROR_DELTA
        assert balanced_pool.total_supply() == 99 * ONE

    def test_reserve_debit(self, balanced_pool: WeightedPool) -> None:
        result = balanced_pool.exitswap_pool_amount_in(DAI, ONE)

        assert result.reserve_amount > 0
        assert balanced_pool.get_balance(DAI) == to_wei("200000") - result.token_amount - result.reserve_amount
        assert balanced_pool.get_collected_reserves(DAI) == result.reserve_amount

    def test_exit_fee_matches_reference(self) -> None:
        pool = make_pool({WETH: ("1000", "1"), DAI: ("1000", "49")}, swap_fee="0.001", exit_fee="0.01")
        result = pool.exitswap_pool_amount_in(DAI, 5 * ONE)

        expected = ref.single_out_given_pool_in(1000, Decimal("0.98"), 100, 5, Decimal("0.001"), Decimal("0.01"))
        assert calc_relative_diff(expected, from_wei(result.token_amount)) <= ERROR_DELTA
        assert pool.total_supply() == 95 * ONE

    def test_min_amount_out(self, balanced_pool: WeightedPool) -> None:
        with pytest.raises(LimitExceeded):
            balanced_pool.exitswap_pool_amount_in(DAI, ONE, min_amount_out=to_wei("6000"))

    def test_max_out_ratio(self, balanced_pool: WeightedPool) -> None:
        with pytest.raises(MaxOutRatioError):
            balanced_pool.exitswap_pool_amount_in(DAI, 20 * ONE)

    def test_more_than_supply(self, balanced_pool: WeightedPool) -> None:
        with pytest.raises(Underflow):
            balanced_pool.exitswap_pool_amount_in(DAI, 101 * ONE)


class TestExitswapExternAmountOut:
    def test_matches_reference(self, balanced_pool: WeightedPool) -> None:
        result = balanced_pool.exitswap_extern_amount_out(WETH, to_wei("5"))

        expected = ref.pool_in_given_single_out(100, Decimal(1) / 3, 100, 5, FEE, 0)
        assert calc_relative_diff(expected, from_wei(result.pool_amount)) <= ERROR_DELTA
        assert balanced_pool.total_supply() == 100 * ONE - result.pool_amount

    def test_reserve_debit(self, balanced_pool: WeightedPool) -> None:
        result = balanced_pool.exitswap_extern_amount_out(WETH, to_wei("5"))

        zaz = (1 - Decimal(1) / 3) * FEE
        expected_reserve = ref.reserves(5 / (1 - zaz), 5, RATIO)
        assert calc_relative_diff(expected_reserve, from_wei(result.reserve_amount)) <= ERROR_DELTA
        assert balanced_pool.get_balance(WETH) == to_wei("95") - result.reserve_amount

    def test_exit_fee_matches_reference(self) -> None:
        pool = make_pool({WETH: ("1000", "1"), DAI: ("1000", "49")}, swap_fee="0.001", exit_fee="0.01")
        result = pool.exitswap_extern_amount_out(DAI, to_wei("10"))

        expected = ref.pool_in_given_single_out(1000, Decimal("0.98"), 100, 10, Decimal("0.001"), Decimal("0.01"))
        assert calc_relative_diff(expected, from_wei(result.pool_amount)) <= ERROR_DELTA
        assert pool.total_supply() == 100 * ONE - result.pool_amount
        assert pool.get_balance(DAI) == to_wei("990")

    def test_max_pool_amount_in(self, balanced_pool: WeightedPool) -> None:
        with pytest.raises(LimitExceeded):
            balanced_pool.exitswap_extern_amount_out(WETH, to_wei("5"), max_pool_amount_in=ONE)

    def test_max_out_ratio(self, balanced_pool: WeightedPool) -> None:
        with pytest.raises(MaxOutRatioError):
            balanced_pool.exitswap_extern_amount_out(WETH, to_wei("34"))

    def test_zero_amount(self, balanced_pool: WeightedPool) -> None:
        with pytest.raises(MathApproximationError):
            balanced_pool.exitswap_extern_amount_out(WETH, 0)

    def test_max_out_ratio_counts_reserve(self) -> None:
        limit = to_wei("1000") * MAX_OUT_RATIO // ONE
        skimming = make_pool({WETH: ("1000", "1"), DAI: ("1000", "1")}, swap_fee="0.1", reserve_ratio="1")
        before = skimming.state

        with pytest.raises(MaxOutRatioError):
            skimming.exitswap_extern_amount_out(WETH, limit)
        assert skimming.state is before

        plain = make_pool({WETH: ("1000", "1"), DAI: ("1000", "1")}, swap_fee="0.1")
        result = plain.exitswap_extern_amount_out(WETH, limit)
        assert result.token_amount == limit
        assert result.reserve_amount == 0
