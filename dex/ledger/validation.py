"""Argument checks shared by the liquidity and swap operations."""

from typing import Any

from dex.errors import InvalidInput
from dex.models.types import normalize_address


def check_amount(value: Any, name: str, max_amount: int, *, allow_zero: bool = False) -> int:
    """Validate an amount argument.

    Raises:
        InvalidInput: If value is not an int, is negative, is zero when zero is
            not allowed, or exceeds max_amount
    """
    # bool is an int subclass, but never a valid amount
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise InvalidInput(f"{name} cannot be negative: {value}")
    if value == 0 and not allow_zero:
        raise InvalidInput(f"{name} must be positive")
    if value > max_amount:
        raise InvalidInput(f"{name} exceeds maximum {max_amount}: {value}")
    return value


def check_account(value: Any, name: str) -> str:
    """Validate and normalize an account identifier.

    Raises:
        InvalidInput: If value is not a non-empty string
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"Invalid {name}: {value!r}")
    return normalize_address(value)
