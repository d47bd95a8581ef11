"""Tests for WeightedPool configuration, reads and logging."""

from decimal import Decimal

import pytest
from structlog.testing import capture_logs

from bpool import WeightedPool
from bpool.pool.errors import (
    AlreadyFinalized,
    InvalidFeeError,
    InvalidToken,
    NotFinalized,
    TokenCountError,
)
from tests.helpers import DAI, MKR, ONE, WETH, to_wei


class TestConfiguration:
    def test_bind_and_read(self) -> None:
        pool = WeightedPool()
        pool.bind(WETH, to_wei("50"), Decimal("5"))
        pool.bind(DAI, to_wei("20000"), Decimal("15"))

        assert pool.get_num_tokens() == 2
        assert pool.get_current_tokens() == (WETH, DAI)
        assert pool.get_balance(DAI) == to_wei("20000")
        assert pool.get_denormalized_weight(WETH) == Decimal(5)
        assert pool.get_total_denormalized_weight() == Decimal(20)
        assert pool.get_normalized_weight(DAI) == Decimal("0.75")
        assert pool.is_bound("Weth")
        assert not pool.is_finalized()

    def test_fee_setters(self, unfinalized_pool: WeightedPool) -> None:
        unfinalized_pool.set_swap_fee(Decimal("0.0025"))
        unfinalized_pool.set_exit_fee(Decimal("0.001"))
        unfinalized_pool.set_reserve_ratio(Decimal("0.4"))

        assert unfinalized_pool.get_swap_fee() == Decimal("0.0025")
        assert unfinalized_pool.get_exit_fee() == Decimal("0.001")
        assert unfinalized_pool.get_reserve_ratio() == Decimal("0.4")

    def test_fee_out_of_range(self, unfinalized_pool: WeightedPool) -> None:
        with pytest.raises(InvalidFeeError):
            unfinalized_pool.set_swap_fee(Decimal("1"))
        with pytest.raises(InvalidFeeError):
            unfinalized_pool.set_reserve_ratio(Decimal("1.5"))

    def test_set_fees_is_all_or_nothing(self, unfinalized_pool: WeightedPool) -> None:
        before = unfinalized_pool.state
        with pytest.raises(InvalidFeeError):
            unfinalized_pool.set_fees(swap_fee=Decimal("0.01"), exit_fee=Decimal("1"))

        assert unfinalized_pool.state is before
        assert unfinalized_pool.get_swap_fee() == Decimal("0.003")

        unfinalized_pool.set_fees(swap_fee=Decimal("0.01"), reserve_ratio=Decimal("0.5"))
        assert unfinalized_pool.get_swap_fee() == Decimal("0.01")
        assert unfinalized_pool.get_exit_fee() == Decimal("0")
        assert unfinalized_pool.get_reserve_ratio() == Decimal("0.5")

    def test_negative_fee(self, unfinalized_pool: WeightedPool) -> None:
        with pytest.raises(ValueError):
            unfinalized_pool.set_swap_fee(Decimal("-0.1"))

    def test_rebind_and_unbind(self, unfinalized_pool: WeightedPool) -> None:
        unfinalized_pool.bind(MKR, to_wei("10"), Decimal("2"))
        unfinalized_pool.rebind(MKR, to_wei("12"), Decimal("3"))
        assert unfinalized_pool.get_balance(MKR) == to_wei("12")

        released = unfinalized_pool.unbind(MKR)
        assert released == to_wei("12")
        assert not unfinalized_pool.is_bound(MKR)

    def test_finalize(self, unfinalized_pool: WeightedPool) -> None:
        with pytest.raises(NotFinalized):
            unfinalized_pool.get_final_tokens()

        minted = unfinalized_pool.finalize()

        assert minted == 100 * ONE
        assert unfinalized_pool.total_supply() == 100 * ONE
        assert unfinalized_pool.get_final_tokens() == (WETH, DAI)

    def test_finalize_once(self, extreme_pool: WeightedPool) -> None:
        with pytest.raises(AlreadyFinalized):
            extreme_pool.finalize()
        with pytest.raises(AlreadyFinalized):
            extreme_pool.set_swap_fee(Decimal("0.002"))
        with pytest.raises(AlreadyFinalized):
            extreme_pool.bind(MKR, ONE, Decimal("1"))

    def test_finalize_needs_two_tokens(self) -> None:
        pool = WeightedPool()
        pool.bind(WETH, ONE, Decimal("1"))
        with pytest.raises(TokenCountError):
            pool.finalize()
        assert not pool.is_finalized()


class TestReads:
    def test_spot_price_with_and_without_fee(self, unfinalized_pool: WeightedPool) -> None:
        # 20000 DAI / 50 WETH at equal weights
        assert unfinalized_pool.get_spot_price(DAI, WETH) == to_wei("400")
        with_fee = unfinalized_pool.get_spot_price_with_fee(DAI, WETH)
        assert with_fee > to_wei("400")
        expected = Decimal(to_wei("400")) / Decimal("0.997")
        assert abs(Decimal(with_fee) - expected) / expected < Decimal("1e-15")

    def test_spot_price_unknown_token(self, extreme_pool: WeightedPool) -> None:
        with pytest.raises(InvalidToken):
            extreme_pool.get_spot_price(WETH, MKR)

    def test_unknown_token_reads(self, extreme_pool: WeightedPool) -> None:
        with pytest.raises(InvalidToken):
            extreme_pool.get_balance(MKR)
        with pytest.raises(InvalidToken):
            extreme_pool.get_collected_reserves(MKR)

    def test_calc_invariant(self, extreme_pool: WeightedPool) -> None:
        assert abs(extreme_pool.calc_invariant() - Decimal(1000)) < Decimal("1e-20")


class TestCopy:
    def test_copy_is_independent(self, extreme_pool: WeightedPool) -> None:
        quote = extreme_pool.copy()
        quote.swap_exact_amount_in(WETH, to_wei("10"), DAI)

        assert extreme_pool.get_balance(WETH) == to_wei("1000")
        assert quote.get_balance(WETH) > to_wei("1000")
        assert quote.pool_id == extreme_pool.pool_id

    def test_copy_quotes_match_commit(self, extreme_pool: WeightedPool) -> None:
        quoted = extreme_pool.copy().swap_exact_amount_in(WETH, to_wei("10"), DAI)
        committed = extreme_pool.swap_exact_amount_in(WETH, to_wei("10"), DAI)
        assert quoted == committed


class TestLogging:
    def test_commit_is_logged(self, extreme_pool: WeightedPool) -> None:
        with capture_logs() as logs:
            extreme_pool.swap_exact_amount_in(WETH, to_wei("1"), DAI)

        events = [log for log in logs if log["event"] == "swap_exact_amount_in"]
        assert len(events) == 1
        assert events[0]["log_level"] == "info"
        assert events[0]["pool_id"] == extreme_pool.pool_id
        assert events[0]["token_in"] == WETH

    def test_rejection_is_logged(self, extreme_pool: WeightedPool) -> None:
        with capture_logs() as logs:
            with pytest.raises(InvalidToken):
                extreme_pool.swap_exact_amount_in(WETH, to_wei("1"), MKR)

        assert logs[-1]["event"] == "pool_operation_rejected"
        assert logs[-1]["log_level"] == "debug"
        assert logs[-1]["error"] == "InvalidToken"
