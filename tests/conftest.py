"""Pytest configuration and fixtures."""

import pytest

from dex.ledger import Ledger
from dex.transfers import TokenBank
from tests.helpers import ALICE, BOB, CAROL, TOKEN_A, TOKEN_B, TOKEN_C, fund, make_ledger


@pytest.fixture
def bank() -> TokenBank:
    """Token bank with ALICE, BOB and CAROL funded in TOKEN_A/B/C."""
    bank = TokenBank()
    for account in (ALICE, BOB, CAROL):
        fund(bank, account, TOKEN_A, TOKEN_B, TOKEN_C)
    return bank


@pytest.fixture
def ledger(bank: TokenBank) -> Ledger:
    """Empty ledger on top of the funded bank."""
    ledger, _ = make_ledger(bank=bank)
    return ledger


@pytest.fixture
def seeded_ledger(ledger: Ledger) -> Ledger:
    """Ledger whose TOKEN_A/TOKEN_B pool ALICE bootstrapped with (100, 400) -> 200 shares."""
    ledger.add_liquidity(TOKEN_A, TOKEN_B, 100, 400, ALICE)
    return ledger


@pytest.fixture
def events(ledger: Ledger) -> list:
    """Notifications published by the ledger fixture, in order."""
    received: list = []
    ledger.subscribe(received.append)
    return received
