"""Shared wire types for the pool service.

Amounts cross the wire as uint256 decimal strings in wei (18 decimals);
fees, ratios and weights as decimal strings.
"""

from decimal import Decimal
from typing import Annotated, Any

from pydantic import BeforeValidator, Field

# Maximum uint256 value
UINT256_MAX = 2**256 - 1


def validate_uint256(value: Any) -> str:
    """Validate that a value is a valid uint256 decimal string.

    Args:
        value: Value to validate (string or int)

    Returns:
        Valid uint256 as decimal string

    Raises:
        ValueError: If value is not a non-negative integer within uint256 range
    """
    if isinstance(value, bool):
        raise ValueError("Uint256 must be string or int, got bool")
    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        try:
            int_value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint256 must be a decimal integer string: '{value}'") from err
    else:
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if int_value > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")
    return str(int_value)


# 256-bit unsigned integer as decimal string (validated)
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]

# Fee, ratio or weight as a non-negative decimal
Fraction = Annotated[Decimal, Field(ge=0, description="Non-negative decimal value")]

# Token identifier (case-insensitive)
TokenId = Annotated[str, Field(min_length=1, max_length=128)]


def to_wei(value: str | None) -> int | None:
    """Convert an optional Uint256 field to int."""
    return None if value is None else int(value)
