"""Fixed-point math for weighted pool pricing.

Values are stored as integers scaled by 10^18. Multiplication and
division come in explicit rounding directions (``*_down`` / ``*_up``) so that
every formula can round in favour of the pool.

Powers use the binomial-series approach of the Balancer V1 BNum library:
the integer part of the exponent is computed by repeated squaring and the
fractional part by a series approximation that stops once a term drops below
``BPOW_PRECISION``.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import ClassVar

from bpool.constants import BONE, BPOW_PRECISION, MAX_BPOW_BASE, MIN_BPOW_BASE

__all__ = [
    # Classes
    "Bfp",
    # Errors
    "FixedPointError",
    "DivisionByZero",
    "Underflow",
    "BaseOutOfBounds",
    # Functions
    "bmul",
    "bdiv",
    "bpowi",
    "bpow_approx",
    "bpow",
    # Constants
    "ONE_18",
]

ONE_18 = BONE


# =============================================================================
# Error classes
# =============================================================================


class FixedPointError(ArithmeticError):
    """Base error for fixed-point arithmetic guards."""

    pass


class DivisionByZero(FixedPointError, ZeroDivisionError):
    """ERR_DIV_ZERO: Division by a zero fixed-point value."""

    pass


class Underflow(FixedPointError):
    """ERR_SUB_UNDERFLOW: Subtraction would produce a negative value."""

    pass


class BaseOutOfBounds(FixedPointError):
    """ERR_BPOW_BASE_TOO_LOW / ERR_BPOW_BASE_TOO_HIGH: Power base outside (0, 2)."""

    pass


# =============================================================================
# Raw integer helpers (round half up, as in Balancer V1 BNum)
# =============================================================================


def _sub_sign(a: int, b: int) -> tuple[int, bool]:
    """Return |a - b| and whether the true difference is negative."""
    if a >= b:
        return a - b, False
    return b - a, True


def bmul(a: int, b: int) -> int:
    """Multiply two fixed-point integers, rounding half up."""
    return (a * b + ONE_18 // 2) // ONE_18


def bdiv(a: int, b: int) -> int:
    """Divide two fixed-point integers, rounding half up."""
    if b == 0:
        raise DivisionByZero("bdiv division by zero")
    return (a * ONE_18 + b // 2) // b


def bpowi(a: int, n: int) -> int:
    """Raise fixed-point ``a`` to the plain integer power ``n``.

    Uses exponentiation by squaring.
    """
    z = a if n % 2 != 0 else ONE_18
    n //= 2
    while n != 0:
        a = bmul(a, a)
        if n % 2 != 0:
            z = bmul(z, a)
        n //= 2
    return z


def bpow_approx(base: int, exp: int, precision: int) -> int:
    """Approximate base^exp for a fractional exponent using the binomial series.

    (1 + x)^a = 1 + a*x + a(a-1)/2! * x^2 + ...

    Args:
        base: Fixed-point base in (0, 2)
        exp: Fixed-point exponent, expected in [0, 1)
        precision: Stop once a term falls below this fixed-point value

    Returns:
        base^exp as an 18-decimal fixed-point integer

    Raises:
        Underflow: If the partial sum would go negative
    """
    a = exp
    x, xneg = _sub_sign(base, ONE_18)
    term = ONE_18
    total = term
    negative = False

    # Each iteration computes the next term from the previous one:
    # term(k) = term(k-1) * (a - (k-1)) * x / k
    i = 1
    while term >= precision:
        big_k = i * ONE_18
        c, cneg = _sub_sign(a, big_k - ONE_18)
        term = bmul(term, bmul(c, x))
        term = bdiv(term, big_k)
        if term == 0:
            break

        if xneg:
            negative = not negative
        if cneg:
            negative = not negative

        if negative:
            if term > total:
                raise Underflow("bpow_approx partial sum went negative")
            total -= term
        else:
            total += term

        i += 1
    return total


def bpow(base: int, exp: int) -> int:
    """Compute base^exp where both are 18-decimal fixed-point.

    Args:
        base: Base in [MIN_BPOW_BASE, MAX_BPOW_BASE], i.e. (0, 2)
        exp: Non-negative exponent

    Returns:
        base^exp as an 18-decimal fixed-point integer

    Raises:
        BaseOutOfBounds: If base is outside (0, 2)
    """
    if base < MIN_BPOW_BASE:
        raise BaseOutOfBounds(f"Power base {base} too low")
    if base > MAX_BPOW_BASE:
        raise BaseOutOfBounds(f"Power base {base} too high")

    whole = (exp // ONE_18) * ONE_18
    remain = exp - whole

    whole_pow = bpowi(base, whole // ONE_18)
    if remain == 0:
        return whole_pow

    partial_result = bpow_approx(base, remain, BPOW_PRECISION)
    return bmul(whole_pow, partial_result)


# =============================================================================
# Bfp class (wrapper for convenient usage)
# =============================================================================


class Bfp:
    """18-decimal fixed-point number stored as int.

    All values are stored as integers scaled by 10^18.
    Example: 1.5 is stored as 1_500_000_000_000_000_000
    """

    ONE: ClassVar[int] = ONE_18

    __slots__ = ("value",)
    __hash__ = None  # type: ignore[assignment]  # Unhashable since we define __eq__

    def __init__(self, value: int) -> None:
        """Create Bfp from raw scaled value."""
        self.value = value

    @classmethod
    def one(cls) -> Bfp:
        """The fixed-point unit 1.0."""
        return cls(cls.ONE)

    @classmethod
    def zero(cls) -> Bfp:
        return cls(0)

    @classmethod
    def from_decimal(cls, d: Decimal) -> Bfp:
        """Create from decimal (will be scaled by 10^18).

        Uses ROUND_HALF_UP for consistent rounding behavior.
        Requires non-negative input (pool quantities are unsigned).
        """
        if d < 0:
            raise ValueError(f"Bfp.from_decimal requires non-negative input, got {d}")
        scaled = (d * cls.ONE).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return cls(int(scaled))

    @classmethod
    def from_int(cls, i: int) -> Bfp:
        """Create from integer (will be scaled by 10^18)."""
        return cls(i * cls.ONE)

    def to_decimal(self) -> Decimal:
        """Convert to Decimal for display."""
        return Decimal(self.value) / Decimal(self.ONE)

    def is_zero(self) -> bool:
        return self.value == 0

    def mul_down(self, other: Bfp) -> Bfp:
        """Multiply with floor rounding: (a * b) // 10^18"""
        return Bfp((self.value * other.value) // self.ONE)

    def mul_up(self, other: Bfp) -> Bfp:
        """Multiply with ceiling rounding."""
        product = self.value * other.value
        if product == 0:
            return Bfp(0)
        return Bfp((product - 1) // self.ONE + 1)

    def div_down(self, other: Bfp) -> Bfp:
        """Divide with floor rounding: (a * 10^18) // b"""
        if other.value == 0:
            raise DivisionByZero("Bfp division by zero")
        return Bfp((self.value * self.ONE) // other.value)

    def div_up(self, other: Bfp) -> Bfp:
        """Divide with ceiling rounding."""
        if other.value == 0:
            raise DivisionByZero("Bfp division by zero")
        numerator = self.value * self.ONE
        if numerator == 0:
            return Bfp(0)
        return Bfp((numerator - 1) // other.value + 1)

    def complement(self) -> Bfp:
        """Return 1 - self. Clamps to 0 if self > 1."""
        return Bfp(max(0, self.ONE - self.value))

    def add(self, other: Bfp) -> Bfp:
        """Add two Bfp values."""
        return Bfp(self.value + other.value)

    def sub(self, other: Bfp) -> Bfp:
        """Subtract other from self.

        Raises:
            Underflow: If other > self
        """
        result = self.value - other.value
        if result < 0:
            raise Underflow(f"Bfp subtraction underflow: {self.value} - {other.value}")
        return Bfp(result)

    def abs_diff(self, other: Bfp) -> Bfp:
        """Return |self - other|."""
        return Bfp(abs(self.value - other.value))

    def pow(self, exp: Bfp) -> Bfp:
        """Compute self^exp. The base must lie in (0, 2)."""
        return Bfp(bpow(self.value, exp.value))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bfp):
            return NotImplemented
        return self.value == other.value

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Bfp):
            return NotImplemented
        return self.value < other.value

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Bfp):
            return NotImplemented
        return self.value <= other.value

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Bfp):
            return NotImplemented
        return self.value > other.value

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Bfp):
            return NotImplemented
        return self.value >= other.value

    def __repr__(self) -> str:
        return f"Bfp({self.value})"

    def __str__(self) -> str:
        return str(self.to_decimal())
