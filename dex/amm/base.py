"""Pricing curve interface used by the swap engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from dex.constants import DEFAULT_FEE_MULTIPLIER
from dex.models.types import normalize_address
from dex.pools.pool import Pool


@dataclass(frozen=True)
class SwapQuote:
    """A priced trade and the reserves it was priced against."""

    token_in: str
    token_out: str
    amount_in: int
    amount_out: int
    reserve_in: int
    reserve_out: int


class PricingCurve(ABC):
    """Two-asset pricing rule over (reserve_in, reserve_out).

    ``fee_multiplier`` is the share of the input that is priced, in basis
    points of FEE_DENOMINATOR.
    """

    @abstractmethod
    def get_amount_out(self, amount_in: int, reserve_in: int, reserve_out: int, fee_multiplier: int) -> int:
        """Output for an exact input, rounded down."""

    @abstractmethod
    def get_amount_in(self, amount_out: int, reserve_in: int, reserve_out: int, fee_multiplier: int) -> int:
        """Input needed for an exact output, rounded up."""

    def simulate_swap(
        self,
        pool: Pool,
        token_in: str,
        amount_in: int,
        fee_multiplier: int = DEFAULT_FEE_MULTIPLIER,
    ) -> SwapQuote:
        """Price an exact-input trade through ``pool`` without touching it.

        Raises:
            InvalidInput: If token_in is not one of the pool's assets
        """
        reserve_in, reserve_out = pool.get_reserves(token_in)
        return SwapQuote(
            token_in=normalize_address(token_in),
            token_out=pool.get_token_out(token_in),
            amount_in=amount_in,
            amount_out=self.get_amount_out(amount_in, reserve_in, reserve_out, fee_multiplier),
            reserve_in=reserve_in,
            reserve_out=reserve_out,
        )
