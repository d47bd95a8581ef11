"""Test helpers module for shared test utilities.

- constants: token ids and common amounts
- numbers: wei conversions and relative differences
- reference_math: Decimal reference formulas
- factories: pool factory
"""

from tests.helpers.constants import DAI, ERROR_DELTA, MAX_UINT, MKR, ONE, WETH, XXX
from tests.helpers.factories import make_pool
from tests.helpers.numbers import calc_relative_diff, from_wei, to_wei

__all__ = [
    # Constants
    "WETH",
    "DAI",
    "MKR",
    "XXX",
    "ONE",
    "MAX_UINT",
    "ERROR_DELTA",
    # Numbers
    "to_wei",
    "from_wei",
    "calc_relative_diff",
    # Factories
    "make_pool",
]
