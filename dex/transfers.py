"""Asset transfer collaborator.

The ledger never moves value itself. It talks to one TokenContract per asset,
as seen from the ledger's own account: ``transfer`` pays out of the ledger,
``transfer_from`` pulls into it. A ``False`` return or a raised exception are
both treated as a failed transfer.

TokenBank is an in-memory implementation used by tests and the development
service. Accounts can register transfer hooks, which run after value moves
and can call back into the ledger, modelling untrusted token receivers.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, TypeAlias, runtime_checkable

import structlog

from dex.models.types import normalize_address

logger = structlog.get_logger()


@runtime_checkable
class TokenContract(Protocol):
    """Protocol for one asset's transfer interface, bound to a caller account."""

    def transfer(self, to: str, amount: int) -> bool:
        """Move amount from the bound caller to ``to``."""
        ...

    def transfer_from(self, sender: str, to: str, amount: int) -> bool:
        """Move amount from ``sender`` to ``to`` on the bound caller's behalf."""
        ...

    def balance_of(self, account: str) -> int:
        """Balance of ``account`` in this asset."""
        ...


# Maps an asset identifier to the contract the ledger uses for it
TokenResolver: TypeAlias = Callable[[str], TokenContract]


@dataclass(frozen=True)
class TransferRecord:
    """A completed movement of one asset between two accounts."""

    asset: str
    sender: str
    recipient: str
    amount: int


TransferHook: TypeAlias = Callable[[TransferRecord], None]


class TokenBank:
    """In-memory balances for any number of assets.

    Transfers are serialized by a single lock that is released before hooks
    run, so a hook may start further transfers (or ledger calls) without
    deadlocking.
    """

    def __init__(self) -> None:
        self._balances: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
        self._hooks: dict[str, list[TransferHook]] = defaultdict(list)
        self._lock = threading.RLock()

    def mint(self, asset: str, account: str, amount: int) -> None:
        """Credit new units of an asset to an account."""
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise ValueError(f"Mint amount must be a non-negative int, got {amount!r}")
        with self._lock:
            self._balances[normalize_address(asset)][normalize_address(account)] += amount

    def balance_of(self, asset: str, account: str) -> int:
        with self._lock:
            return self._balances[normalize_address(asset)].get(normalize_address(account), 0)

    def add_hook(self, account: str, hook: TransferHook) -> None:
        """Run ``hook`` after every transfer that debits or credits ``account``."""
        self._hooks[normalize_address(account)].append(hook)

    def clear_hooks(self) -> None:
        self._hooks.clear()

    def move(self, asset: str, sender: str, recipient: str, amount: int) -> bool:
        """Move amount between accounts.

        Returns:
            False if the sender's balance is too small or the amount is invalid.
            Exceptions raised by hooks propagate. They revert the movement
            unless the recipient no longer holds the amount, in which case
            the movement stands so no balance goes negative.
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            return False

        record = TransferRecord(
            asset=normalize_address(asset),
            sender=normalize_address(sender),
            recipient=normalize_address(recipient),
            amount=amount,
        )
        with self._lock:
            balances = self._balances[record.asset]
            if balances.get(record.sender, 0) < amount:
                logger.debug(
                    "transfer_insufficient_balance",
                    asset=record.asset,
                    sender=record.sender,
                    amount=amount,
                )
                return False
            balances[record.sender] -= amount
            balances[record.recipient] += amount

        try:
            for account in dict.fromkeys((record.sender, record.recipient)):
                for hook in list(self._hooks.get(account, ())):
                    hook(record)
        except Exception:
            with self._lock:
                if balances.get(record.recipient, 0) >= amount:
                    balances[record.recipient] -= amount
                    balances[record.sender] += amount
                else:
                    # A hook already spent the funds; the movement stands
                    logger.warning(
                        "transfer_revert_failed",
                        asset=record.asset,
                        sender=record.sender,
                        recipient=record.recipient,
                        amount=amount,
                    )
            raise

        return True

    def token(self, asset: str, caller: str) -> BoundToken:
        """Get a TokenContract for ``asset`` acting on behalf of ``caller``."""
        return BoundToken(self, normalize_address(asset), normalize_address(caller))

    def resolver(self, caller: str) -> TokenResolver:
        """Get a TokenResolver whose contracts act on behalf of ``caller``."""

        def resolve(asset: str) -> TokenContract:
            return self.token(asset, caller)

        return resolve


class BoundToken:
    """TokenContract view of one TokenBank asset for a fixed caller.

    ``transfer_from`` is authorized by the host; allowances are not modelled.
    """

    def __init__(self, bank: TokenBank, asset: str, caller: str) -> None:
        self.bank = bank
        self.asset = asset
        self.caller = caller

    def transfer(self, to: str, amount: int) -> bool:
        return self.bank.move(self.asset, self.caller, to, amount)

    def transfer_from(self, sender: str, to: str, amount: int) -> bool:
        return self.bank.move(self.asset, sender, to, amount)

    def balance_of(self, account: str) -> int:
        return self.bank.balance_of(self.asset, account)


__all__ = [
    "TokenContract",
    "TokenResolver",
    "TransferRecord",
    "TransferHook",
    "TokenBank",
    "BoundToken",
]
