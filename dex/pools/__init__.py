"""Pool management package.

Provides PoolRegistry for canonical pair addressing and pool record storage.
"""

from .pool import Pool, PoolKey
from .registry import PoolGuard, PoolRegistry

__all__ = [
    "Pool",
    "PoolKey",
    "PoolGuard",
    "PoolRegistry",
]
