"""Ledger facade.

Composes the pool registry, liquidity accounting and swap engine behind the
operation and query surface callers use, and publishes notifications once an
operation has committed and released its pool.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable

import structlog

from dex.amm.base import PricingCurve
from dex.amm.constant_product import constant_product
from dex.config import DEFAULT_LEDGER_CONFIG, LedgerConfig
from dex.errors import InvariantViolation
from dex.ledger.events import EventBus, Subscriber
from dex.ledger.liquidity import LiquidityAccounting
from dex.ledger.swap import SwapEngine
from dex.models.types import normalize_address
from dex.pools.pool import Pool
from dex.pools.registry import PoolRegistry
from dex.transfers import TokenBank, TokenResolver

logger = structlog.get_logger()


class Ledger:
    """Constant product liquidity ledger.

    Args:
        tokens: Resolver from asset identifier to the transfer contract the
            ledger account uses for it
        config: Ledger configuration. If None, uses DEFAULT_LEDGER_CONFIG.
        registry: Pool registry to use. If None, starts empty.
        amm: Pricing curve. If None, uses the shared constant product curve.
    """

    def __init__(
        self,
        tokens: TokenResolver,
        config: LedgerConfig | None = None,
        registry: PoolRegistry | None = None,
        amm: PricingCurve | None = None,
    ) -> None:
        self.config = config or DEFAULT_LEDGER_CONFIG
        self.tokens = tokens
        self.registry = registry or PoolRegistry()
        self.events = EventBus()
        self.liquidity = LiquidityAccounting(self.registry, tokens, self.config)
        self.swaps = SwapEngine(self.registry, tokens, self.config, amm or constant_product)

    @classmethod
    def with_token_bank(cls, bank: TokenBank, config: LedgerConfig | None = None) -> Ledger:
        """Create a ledger whose assets live in an in-memory TokenBank."""
        config = config or DEFAULT_LEDGER_CONFIG
        return cls(bank.resolver(config.address), config=config)

    @property
    def address(self) -> str:
        return self.config.address

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Receive LiquidityAdded / LiquidityRemoved / Swapped notifications.

        Returns:
            A callable that unsubscribes
        """
        return self.events.subscribe(subscriber)

    # Operations

    def add_liquidity(self, asset_a: str, asset_b: str, amount_a: int, amount_b: int, provider: str) -> int:
        """Deposit into a pool. Returns the shares issued to the provider."""
        event = self.liquidity.add_liquidity(asset_a, asset_b, amount_a, amount_b, provider)
        self.events.publish(event)
        return event.shares_issued

    def remove_liquidity(self, asset_a: str, asset_b: str, share_amount: int, provider: str) -> tuple[int, int]:
        """Redeem shares. Returns the amounts paid out, in (asset_a, asset_b) order."""
        event = self.liquidity.remove_liquidity(asset_a, asset_b, share_amount, provider)
        self.events.publish(event)
        if normalize_address(asset_a) == event.token0:
            return event.amount0, event.amount1
        return event.amount1, event.amount0

    def swap(self, asset_in: str, asset_out: str, amount_in: int, min_amount_out: int, trader: str) -> int:
        """Sell ``amount_in`` of asset_in. Returns the amount of asset_out received."""
        event = self.swaps.swap(asset_in, asset_out, amount_in, min_amount_out, trader)
        self.events.publish(event)
        return event.amount_out

    # Queries

    def get_reserves(self, asset_a: str, asset_b: str) -> tuple[int, int]:
        """Reserves of a pair in canonical (token0, token1) order."""
        return self.registry.get_reserves(asset_a, asset_b)

    def get_share(self, asset_a: str, asset_b: str, provider: str) -> int:
        return self.registry.get_share(asset_a, asset_b, provider)

    def get_total_shares(self, asset_a: str, asset_b: str) -> int:
        return self.registry.get_total_shares(asset_a, asset_b)

    def get_pool(self, asset_a: str, asset_b: str) -> Pool | None:
        return self.registry.get_pool(asset_a, asset_b)

    def list_pools(self) -> list[Pool]:
        """Committed copies of every pool holding liquidity, in canonical order."""
        return list(self.registry.iter_pools())

    def quote(self, asset_in: str, asset_out: str, amount_in: int) -> int:
        return self.swaps.quote(asset_in, asset_out, amount_in)

    def quote_amount_in(self, asset_in: str, asset_out: str, amount_out: int) -> int:
        return self.swaps.quote_amount_in(asset_in, asset_out, amount_out)

    # Audit

    def verify_solvency(self) -> None:
        """Check bookkeeping invariants and that the ledger holds every reserve.

        For each asset, the ledger account's balance must cover the sum of
        that asset's reserves across all pools.

        Raises:
            InvariantViolation: If any check fails
        """
        self.registry.check_invariants()

        owed: dict[str, int] = defaultdict(int)
        for pool in self.registry.iter_pools():
            owed[pool.token0] += pool.reserve0
            owed[pool.token1] += pool.reserve1

        for asset, reserves in sorted(owed.items()):
            balance = self.tokens(asset).balance_of(self.address)
            if balance < reserves:
                logger.error(
                    "ledger_insolvent",
                    asset=asset,
                    balance=balance,
                    reserves=reserves,
                )
                raise InvariantViolation(f"Ledger holds {balance} of {asset} but owes {reserves} in reserves")
