"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Asset identifiers, accounts and balances
- factories: Ledger factory and token doubles
"""

from tests.helpers.constants import (
    ALICE,
    BOB,
    CAROL,
    DAI,
    INITIAL_BALANCE,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
    USDC,
    WETH,
)
from tests.helpers.factories import FailingToken, fund, make_ledger, resolver_with_overrides

__all__ = [
    # Constants
    "TOKEN_A",
    "TOKEN_B",
    "TOKEN_C",
    "WETH",
    "USDC",
    "DAI",
    "ALICE",
    "BOB",
    "CAROL",
    "INITIAL_BALANCE",
    # Factories
    "make_ledger",
    "fund",
    "FailingToken",
    "resolver_with_overrides",
]
