"""Notifications published after a ledger operation commits.

Notifications are informational: a failing subscriber is logged and skipped,
it never undoes a committed operation.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import asdict, dataclass
from typing import TypeAlias

import structlog

logger = structlog.get_logger()


@dataclass(frozen=True)
class LiquidityAdded:
    provider: str
    token0: str
    token1: str
    amount0: int
    amount1: int
    shares_issued: int


@dataclass(frozen=True)
class LiquidityRemoved:
    provider: str
    token0: str
    token1: str
    amount0: int
    amount1: int
    shares_burned: int


@dataclass(frozen=True)
class Swapped:
    trader: str
    asset_in: str
    asset_out: str
    amount_in: int
    amount_out: int


LedgerEvent: TypeAlias = LiquidityAdded | LiquidityRemoved | Swapped
Subscriber: TypeAlias = Callable[[LedgerEvent], None]

# structlog event names, one per notification type
_LOG_EVENT_NAMES: dict[type, str] = {
    LiquidityAdded: "liquidity_added",
    LiquidityRemoved: "liquidity_removed",
    Swapped: "swap_executed",
}


class EventBus:
    """Fan-out of ledger notifications to subscribers."""

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []
        self._lock = threading.Lock()

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Register a subscriber.

        Returns:
            A callable that removes the subscriber again
        """
        with self._lock:
            self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            with self._lock:
                if subscriber in self._subscribers:
                    self._subscribers.remove(subscriber)

        return unsubscribe

    def publish(self, event: LedgerEvent) -> None:
        logger.info(_LOG_EVENT_NAMES[type(event)], **asdict(event))
        with self._lock:
            subscribers = list(self._subscribers)
        for subscriber in subscribers:
            try:
                subscriber(event)
            except Exception:
                logger.exception("event_subscriber_failed", event_type=type(event).__name__)
