"""Ledger error classes.

Every error is terminal to the operation in progress: the ledger rolls back
to the state it had before the call and keeps no record of the attempt.
"""


class LedgerError(Exception):
    """Base error for ledger operations."""

    pass


class InvalidInput(LedgerError):
    """Identical assets, zero or out-of-range amount, or malformed identifier."""

    pass


class RatioMismatch(LedgerError):
    """Deposit into a funded pool does not match the reserve ratio exactly."""

    pass


class InsufficientLiquidity(LedgerError):
    """Pool reserves are empty, or the computed output amount is zero."""

    pass


class SlippageExceeded(LedgerError):
    """Swap output fell below the caller's minimum."""

    pass


class InsufficientShares(LedgerError):
    """Redeeming more shares than held, or a deposit that would issue none."""

    pass


class TransferFailure(LedgerError):
    """The transfer collaborator rejected or failed to move assets."""

    pass


class ReentrancyError(LedgerError):
    """A call re-entered a pool whose operation has not completed yet."""

    pass


class InvariantViolation(LedgerError):
    """Ledger bookkeeping no longer satisfies an accounting invariant."""

    pass
