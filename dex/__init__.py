"""Constant product liquidity ledger."""

from dex.config import DEFAULT_LEDGER_CONFIG, LedgerConfig
from dex.ledger import Ledger
from dex.transfers import TokenBank

__version__ = "0.1.0"
__all__ = ["Ledger", "LedgerConfig", "DEFAULT_LEDGER_CONFIG", "TokenBank", "__version__"]
