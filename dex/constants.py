"""Ledger constants.

Centralizes numeric bounds and protocol parameters used across the ledger.
"""

# Largest amount a reserve, share balance or transfer may hold
UINT256_MAX = 2**256 - 1

# Fee math works in basis points: amount_in_with_fee = amount_in * (10000 - fee_bps)
FEE_DENOMINATOR = 10_000

# 0.3% swap fee retained by the pool (997/1000 of the input is priced)
DEFAULT_FEE_BPS = 30

# Account that holds pooled assets on behalf of the ledger
DEFAULT_LEDGER_ADDRESS = "0x" + "de" * 20

# Share of a swap input that is priced, in basis points (9970 for 30 bps)
DEFAULT_FEE_MULTIPLIER = FEE_DENOMINATOR - DEFAULT_FEE_BPS
