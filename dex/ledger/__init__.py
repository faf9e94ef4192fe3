"""Liquidity ledger: deposits, withdrawals and swaps as atomic operations."""

from dex.ledger.events import EventBus, LedgerEvent, LiquidityAdded, LiquidityRemoved, Swapped
from dex.ledger.ledger import Ledger
from dex.ledger.liquidity import LiquidityAccounting, amounts_for_shares, shares_for_deposit
from dex.ledger.swap import SwapEngine

__all__ = [
    "Ledger",
    "LiquidityAccounting",
    "SwapEngine",
    "shares_for_deposit",
    "amounts_for_shares",
    # Notifications
    "EventBus",
    "LedgerEvent",
    "LiquidityAdded",
    "LiquidityRemoved",
    "Swapped",
]
