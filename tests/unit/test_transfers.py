"""Tests for the in-memory token bank."""

import pytest
from structlog.testing import capture_logs

from dex.transfers import BoundToken, TokenBank, TokenContract, TransferRecord
from tests.helpers import ALICE, BOB, CAROL, TOKEN_A, TOKEN_B


@pytest.fixture
def funded_bank() -> TokenBank:
    bank = TokenBank()
    bank.mint(TOKEN_A, ALICE, 1_000)
    return bank


class TestTokenBank:
    """Tests for balances and movements."""

    def test_mint_and_balance(self, funded_bank):
        assert funded_bank.balance_of(TOKEN_A, ALICE) == 1_000
        assert funded_bank.balance_of(TOKEN_B, ALICE) == 0
        assert funded_bank.balance_of(TOKEN_A, BOB) == 0

    def test_identifiers_normalized(self, funded_bank):
        assert funded_bank.balance_of(TOKEN_A.upper().replace("0X", "0x"), ALICE[2:]) == 1_000

    @pytest.mark.parametrize("amount", [-1, True, 1.5])
    def test_mint_rejects_bad_amount(self, funded_bank, amount):
        with pytest.raises(ValueError):
            funded_bank.mint(TOKEN_A, ALICE, amount)

    def test_move(self, funded_bank):
        assert funded_bank.move(TOKEN_A, ALICE, BOB, 400)
        assert funded_bank.balance_of(TOKEN_A, ALICE) == 600
        assert funded_bank.balance_of(TOKEN_A, BOB) == 400

    def test_move_insufficient_balance(self, funded_bank):
        assert funded_bank.move(TOKEN_A, ALICE, BOB, 1_001) is False
        assert funded_bank.balance_of(TOKEN_A, ALICE) == 1_000

    @pytest.mark.parametrize("amount", [-1, True, "5"])
    def test_move_invalid_amount(self, funded_bank, amount):
        assert funded_bank.move(TOKEN_A, ALICE, BOB, amount) is False


class TestTransferHooks:
    """Tests for receiver/sender callbacks."""

    def test_hook_sees_both_sides(self, funded_bank):
        seen = []
        funded_bank.add_hook(ALICE, seen.append)
        funded_bank.add_hook(BOB, seen.append)

        funded_bank.move(TOKEN_A, ALICE, BOB, 10)

        record = TransferRecord(asset=TOKEN_A, sender=ALICE, recipient=BOB, amount=10)
        assert seen == [record, record]

    def test_self_transfer_runs_hook_once(self, funded_bank):
        seen = []
        funded_bank.add_hook(ALICE, seen.append)
        funded_bank.move(TOKEN_A, ALICE, ALICE, 10)
        assert len(seen) == 1

    def test_hook_runs_after_balances_move(self, funded_bank):
        observed = []
        funded_bank.add_hook(BOB, lambda record: observed.append(funded_bank.balance_of(TOKEN_A, BOB)))
        funded_bank.move(TOKEN_A, ALICE, BOB, 10)
        assert observed == [10]

    def test_raising_hook_reverts_move(self, funded_bank):
        def hook(record):
            raise RuntimeError("receiver refused")

        funded_bank.add_hook(BOB, hook)

        with pytest.raises(RuntimeError):
            funded_bank.move(TOKEN_A, ALICE, BOB, 10)

        assert funded_bank.balance_of(TOKEN_A, ALICE) == 1_000
        assert funded_bank.balance_of(TOKEN_A, BOB) == 0

    def test_raising_hook_that_spent_funds_keeps_balances_non_negative(self, funded_bank):
        def forward_then_raise(record):
            if record.recipient == BOB:
                funded_bank.move(TOKEN_A, BOB, CAROL, record.amount)
                raise RuntimeError("receiver refused")

        funded_bank.add_hook(BOB, forward_then_raise)

        with capture_logs() as logs:
            with pytest.raises(RuntimeError):
                funded_bank.move(TOKEN_A, ALICE, BOB, 100)

        # The movement could not be undone, so it stands
        assert funded_bank.balance_of(TOKEN_A, ALICE) == 900
        assert funded_bank.balance_of(TOKEN_A, BOB) == 0
        assert funded_bank.balance_of(TOKEN_A, CAROL) == 100
        assert any(entry["event"] == "transfer_revert_failed" for entry in logs)

    def test_clear_hooks(self, funded_bank):
        seen = []
        funded_bank.add_hook(BOB, seen.append)
        funded_bank.clear_hooks()
        funded_bank.move(TOKEN_A, ALICE, BOB, 10)
        assert seen == []


class TestBoundToken:
    """Tests for the TokenContract view."""

    def test_satisfies_protocol(self, funded_bank):
        assert isinstance(funded_bank.token(TOKEN_A, ALICE), TokenContract)

    def test_transfer_from_bound_caller(self, funded_bank):
        token = funded_bank.token(TOKEN_A, ALICE)
        assert token.transfer(BOB, 100)
        assert token.balance_of(BOB) == 100

    def test_transfer_from_third_party(self, funded_bank):
        token = funded_bank.token(TOKEN_A, BOB)
        assert token.transfer_from(ALICE, BOB, 100)
        assert funded_bank.balance_of(TOKEN_A, ALICE) == 900

    def test_resolver(self, funded_bank):
        token = funded_bank.resolver(BOB)(TOKEN_A)
        assert isinstance(token, BoundToken)
        assert token.caller == BOB
        assert token.asset == TOKEN_A
