"""Identifier and amount types shared by the ledger core and the HTTP models."""

import re
from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from dex.constants import UINT256_MAX

_ADDRESS_RE = re.compile(r"0x[0-9a-fA-F]{40}")


def validate_uint256(value: Any) -> str:
    """Coerce an int or decimal string to a canonical uint256 decimal string.

    Raises:
        ValueError: For bools, non-numeric input, negatives, or values above 2^256-1
    """
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError(f"Uint256 must be an int or decimal string, got {type(value).__name__}")

    try:
        number = int(value)
    except ValueError as err:
        raise ValueError(f"Not a decimal integer: {value!r}") from err

    if not 0 <= number <= UINT256_MAX:
        raise ValueError(f"{number} is outside the uint256 range")
    return str(number)


# 0x-prefixed asset or account identifier; 20-byte addresses are the usual case
Identifier = Annotated[str, Field(min_length=3, max_length=66, pattern=r"^0x[a-zA-Z0-9_]+$")]

# Amounts travel as decimal strings so JSON clients never round them
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Lowercase an identifier and make sure it carries the 0x prefix.

    Normalized identifiers of equal length sort like the bytes they encode,
    which is the order canonical pool keys use.

    Args:
        address: Identifier, with or without 0x prefix
        validate: Also require a 20-byte hex address

    Raises:
        ValueError: If validate is set and the result is not an address
    """
    normalized = address.strip().lower()
    if not normalized.startswith("0x"):
        normalized = f"0x{normalized}"
    if validate and not is_valid_address(normalized):
        raise ValueError(f"Invalid address: {address}")
    return normalized


def is_valid_address(address: str) -> bool:
    return isinstance(address, str) and _ADDRESS_RE.fullmatch(address) is not None
