"""Pytest configuration and fixtures."""

import pytest

from bpool import WeightedPool
from tests.helpers import DAI, MKR, WETH, make_pool


@pytest.fixture
def extreme_pool() -> WeightedPool:
    """Finalized WETH/DAI pool with weights 1/49, fee 0.1% and reserve ratio 0.5."""
    return make_pool(
        {WETH: ("1000", "1"), DAI: ("1000", "49")},
        swap_fee="0.001",
        reserve_ratio="0.5",
    )


@pytest.fixture
def balanced_pool() -> WeightedPool:
    """Finalized three-token pool with equal weights and a 0.3% fee."""
    return make_pool(
        {WETH: ("100", "10"), DAI: ("200000", "10"), MKR: ("500", "10")},
        swap_fee="0.003",
        reserve_ratio="0.2",
    )


@pytest.fixture
def unfinalized_pool() -> WeightedPool:
    """WETH/DAI pool still being configured."""
    return make_pool({WETH: ("50", "5"), DAI: ("20000", "5")}, swap_fee="0.003", finalize=False)
