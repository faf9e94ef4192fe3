"""Integer math primitives for the ledger."""

from dex.math.sqrt import isqrt

__all__ = ["isqrt"]
