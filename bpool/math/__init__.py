"""Mathematical utilities for weighted pools.

This package provides mathematical primitives for pool calculations:
- Bfp: 18-decimal fixed-point arithmetic (Balancer-style)
- bpow: fixed-point power with a fractional exponent
"""

from bpool.math.fixed_point import (
    BaseOutOfBounds,
    Bfp,
    DivisionByZero,
    FixedPointError,
    Underflow,
    bpow,
)

__all__ = ["Bfp", "bpow", "FixedPointError", "DivisionByZero", "Underflow", "BaseOutOfBounds"]
