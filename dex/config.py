"""Ledger configuration."""

from dataclasses import dataclass

from dex.constants import DEFAULT_FEE_BPS, DEFAULT_LEDGER_ADDRESS, FEE_DENOMINATOR, UINT256_MAX
from dex.models.types import normalize_address


@dataclass(frozen=True)
class LedgerConfig:
    """Centralized configuration for a ledger instance.

    Attributes:
        fee_bps: Swap fee in basis points (default: 30 = 0.3%)
        address: Account that holds pooled assets. Pulls credit it and
            pushes debit it.
        max_amount: Upper bound for any amount accepted by the ledger
            (default: 2^256 - 1)
    """

    fee_bps: int = DEFAULT_FEE_BPS
    address: str = DEFAULT_LEDGER_ADDRESS
    max_amount: int = UINT256_MAX

    def __post_init__(self) -> None:
        if not 0 <= self.fee_bps < FEE_DENOMINATOR:
            raise ValueError(f"fee_bps must be in [0, {FEE_DENOMINATOR}), got {self.fee_bps}")
        if self.max_amount <= 0:
            raise ValueError(f"max_amount must be positive, got {self.max_amount}")
        # Frozen dataclass: bypass __setattr__ to store the normalized form
        object.__setattr__(self, "address", normalize_address(self.address))

    @property
    def fee_multiplier(self) -> int:
        """Fee multiplier for AMM math (10000 - fee_bps).

        For 30 bps (0.3%), this returns 9970.
        """
        return FEE_DENOMINATOR - self.fee_bps


# Default configuration instance
DEFAULT_LEDGER_CONFIG = LedgerConfig()
