"""Atomic unit for ledger operations.

Every mutating operation runs inside ``atomic_operation``:

1. The pool's guard is held for the whole operation, including the calls into
   the transfer collaborator. A transfer callback calling back into any pool
   is rejected with ReentrancyError; other threads wait.
2. The pool record is snapshotted on entry.
3. Completed transfers are journaled.
4. Any exception restores the snapshot and reverses journaled transfers,
   newest first, before it propagates.

Compensating transfers can themselves fail (a receiver that has already
spent the funds, for example). Such failures are logged and never replace
the original error.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager

import structlog

from dex.errors import TransferFailure
from dex.models.types import normalize_address
from dex.pools.pool import Pool, PoolKey
from dex.pools.registry import PoolRegistry
from dex.transfers import TokenResolver, TransferRecord

logger = structlog.get_logger()


class OperationJournal:
    """Transfer access for one operation, with a record of what moved."""

    def __init__(self, registry: PoolRegistry, key: PoolKey, tokens: TokenResolver, ledger_address: str) -> None:
        self.registry = registry
        self.key = key
        self.tokens = tokens
        self.ledger_address = ledger_address
        self.transfers: list[TransferRecord] = []

    @property
    def pool(self) -> Pool:
        """The live pool record, created empty on first use."""
        return self.registry.get_or_create(self.key)

    def pull(self, asset: str, sender: str, amount: int) -> None:
        """Move ``amount`` of ``asset`` from ``sender`` into the ledger.

        Raises:
            TransferFailure: If the collaborator returns False or raises
        """
        token = self.tokens(asset)
        self._call(
            asset,
            sender,
            self.ledger_address,
            amount,
            lambda: token.transfer_from(sender, self.ledger_address, amount),
        )

    def push(self, asset: str, recipient: str, amount: int) -> None:
        """Move ``amount`` of ``asset`` from the ledger to ``recipient``.

        Raises:
            TransferFailure: If the collaborator returns False or raises
        """
        token = self.tokens(asset)
        self._call(asset, self.ledger_address, recipient, amount, lambda: token.transfer(recipient, amount))

    def _call(self, asset: str, sender: str, recipient: str, amount: int, move: Callable[[], bool]) -> None:
        try:
            ok = move()
        except Exception as err:
            raise TransferFailure(
                f"Transfer of {amount} {asset} from {sender} to {recipient} raised {type(err).__name__}: {err}"
            ) from err
        if ok is not True:
            raise TransferFailure(f"Transfer of {amount} {asset} from {sender} to {recipient} was rejected")

        self.transfers.append(
            TransferRecord(
                asset=normalize_address(asset),
                sender=normalize_address(sender),
                recipient=normalize_address(recipient),
                amount=amount,
            )
        )

    def compensate(self) -> None:
        """Reverse every journaled transfer, newest first."""
        while self.transfers:
            record = self.transfers.pop()
            token = self.tokens(record.asset)
            try:
                if record.recipient == self.ledger_address:
                    ok = token.transfer(record.sender, record.amount)
                else:
                    ok = token.transfer_from(record.recipient, self.ledger_address, record.amount)
            except Exception:
                logger.exception(
                    "transfer_rollback_failed",
                    asset=record.asset,
                    sender=record.sender,
                    recipient=record.recipient,
                    amount=record.amount,
                )
                continue
            if ok is not True:
                logger.error(
                    "transfer_rollback_failed",
                    asset=record.asset,
                    sender=record.sender,
                    recipient=record.recipient,
                    amount=record.amount,
                )


@contextmanager
def atomic_operation(
    registry: PoolRegistry,
    key: PoolKey,
    tokens: TokenResolver,
    ledger_address: str,
    operation: str,
) -> Iterator[OperationJournal]:
    """Run one ledger operation as an all-or-nothing unit on a pool.

    Args:
        registry: Registry holding the pool record
        key: Canonical pool key
        tokens: Resolver for the assets' transfer contracts
        ledger_address: Account holding pooled assets
        operation: Operation name for logging

    Yields:
        OperationJournal for moving assets and reaching the pool record

    Raises:
        ReentrancyError: If the current thread is already inside a ledger operation
    """
    with registry.hold(key):
        live = registry.lookup(key)
        snapshot = live.copy() if live is not None else None
        journal = OperationJournal(registry, key, tokens, ledger_address)
        try:
            yield journal
        except BaseException as err:
            registry.replace(key, snapshot)
            journal.compensate()
            logger.info(
                "operation_rolled_back",
                operation=operation,
                token0=key[0],
                token1=key[1],
                error=type(err).__name__,
                reason=str(err),
            )
            raise
