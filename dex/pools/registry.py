"""Pool registry for the liquidity ledger.

This module provides PoolRegistry, the single place that turns an unordered
asset pair into its canonical key and stores the pool record for that key.
Records are created lazily by the first deposit and dropped again once the
last share is redeemed, so an empty pool and an unknown pool look the same.

A key in use also owns a PoolGuard: the exclusive section every mutating
operation (and every guarded read) runs under. Guards live only while some
thread holds or waits for them, so reads of pairs that were never funded
leave nothing behind.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from dex.errors import InvalidInput, InvariantViolation, ReentrancyError
from dex.models.types import normalize_address
from dex.pools.pool import Pool, PoolKey

logger = structlog.get_logger()

# Key of the pool guard the current thread holds, if any
_held = threading.local()


class PoolGuard:
    """Exclusive section for one pool.

    Other threads block until the holder leaves. A thread holds at most one
    guard at a time: a nested entry means a transfer callback is calling back
    into the ledger mid-operation. It is rejected for the same pool, so the
    callback never sees uncommitted state, and for any other pool, so two
    callbacks crossing into each other's pools cannot deadlock.
    """

    def __init__(self, key: PoolKey) -> None:
        self.key = key
        self._lock = threading.Lock()
        self._owner: int | None = None
        # Threads holding or waiting for this guard; maintained by PoolRegistry
        self.users = 0

    @property
    def held_by_current_thread(self) -> bool:
        return self._owner == threading.get_ident()

    @contextmanager
    def hold(self) -> Iterator[None]:
        """Enter the pool's exclusive section.

        Raises:
            ReentrancyError: If the current thread already holds a pool guard
        """
        held = getattr(_held, "key", None)
        if held is not None:
            logger.warning(
                "reentrant_call_rejected",
                token0=self.key[0],
                token1=self.key[1],
                held_token0=held[0],
                held_token1=held[1],
            )
            if held == self.key:
                raise ReentrancyError(f"Pool {self.key[0]}/{self.key[1]} is locked by an operation in progress")
            raise ReentrancyError(
                f"Pool {self.key[0]}/{self.key[1]} cannot be entered while an operation "
                f"on {held[0]}/{held[1]} is in progress"
            )
        with self._lock:
            self._owner = threading.get_ident()
            _held.key = self.key
            try:
                yield
            finally:
                _held.key = None
                self._owner = None


class PoolRegistry:
    """Registry of pool records keyed by canonical pair.

    Public read methods take the pool's guard whenever the pair has a record
    or an operation in flight, so they return committed state only. Methods
    documented as unguarded are for code already running inside the guard
    (the liquidity and swap operations).
    """

    def __init__(self) -> None:
        self._pools: dict[PoolKey, Pool] = {}
        self._guards: dict[PoolKey, PoolGuard] = {}
        # Protects the two dicts above, not the pool records themselves
        self._lock = threading.Lock()

    @staticmethod
    def canonicalize(asset_a: str, asset_b: str) -> PoolKey:
        """Order an unordered asset pair into its canonical key.

        Identifiers are compared case-insensitively and the 0x prefix is
        optional: ``USDC``, ``usdc`` and ``0xUSDC`` all name the same asset.
        Keys are ordered by the normalized (lowercase, prefixed) strings.

        Args:
            asset_a: First asset identifier (any case)
            asset_b: Second asset identifier (any case)

        Returns:
            (token0, token1) with token0 < token1

        Raises:
            InvalidInput: If an identifier is empty or both name the same asset
        """
        for asset in (asset_a, asset_b):
            if not isinstance(asset, str) or not asset.strip():
                raise InvalidInput(f"Invalid asset identifier: {asset!r}")

        token_a = normalize_address(asset_a)
        token_b = normalize_address(asset_b)
        if token_a == token_b:
            raise InvalidInput(f"Identical assets: {token_a}")
        return (min(token_a, token_b), max(token_a, token_b))

    @contextmanager
    def hold(self, key: PoolKey) -> Iterator[None]:
        """Hold the exclusive guard for a canonical key.

        The guard is created on first use and dropped once no thread holds or
        waits for it.

        Raises:
            ReentrancyError: If the current thread already holds a pool guard
        """
        with self._lock:
            guard = self._guards.get(key)
            if guard is None:
                guard = PoolGuard(key)
                self._guards[key] = guard
            guard.users += 1
        try:
            with guard.hold():
                yield
        finally:
            with self._lock:
                guard.users -= 1
                if guard.users == 0:
                    del self._guards[key]

    @property
    def guard_count(self) -> int:
        """Return the number of guards currently held or waited for."""
        with self._lock:
            return len(self._guards)

    def _in_use(self, key: PoolKey) -> bool:
        with self._lock:
            return key in self._pools or key in self._guards

    # Unguarded access (caller holds the pool's guard)

    def lookup(self, key: PoolKey) -> Pool | None:
        """Get the live pool record for a key, or None. Unguarded."""
        return self._pools.get(key)

    def get_or_create(self, key: PoolKey) -> Pool:
        """Get the live pool record for a key, creating an empty one. Unguarded."""
        with self._lock:
            pool = self._pools.get(key)
            if pool is None:
                pool = Pool(token0=key[0], token1=key[1])
                self._pools[key] = pool
                logger.debug("pool_created", token0=key[0], token1=key[1])
            return pool

    def replace(self, key: PoolKey, pool: Pool | None) -> None:
        """Install a record for a key, or drop the key when pool is None. Unguarded."""
        with self._lock:
            if pool is None:
                self._pools.pop(key, None)
            else:
                self._pools[key] = pool

    def discard_if_empty(self, key: PoolKey) -> None:
        """Drop a record whose last share was redeemed. Unguarded."""
        with self._lock:
            pool = self._pools.get(key)
            if pool is not None and pool.is_empty:
                del self._pools[key]
                logger.debug("pool_emptied", token0=key[0], token1=key[1])

    # Guarded reads

    def get_pool(self, asset_a: str, asset_b: str) -> Pool | None:
        """Get a copy of the pool record for a pair (order independent).

        Returns:
            Pool copy if the pool holds liquidity, None otherwise
        """
        key = self.canonicalize(asset_a, asset_b)
        if not self._in_use(key):
            # Nothing stored and no operation in flight
            return None
        with self.hold(key):
            pool = self._pools.get(key)
            return pool.copy() if pool is not None else None

    def get_reserves(self, asset_a: str, asset_b: str) -> tuple[int, int]:
        """Get (reserve0, reserve1) in canonical order; (0, 0) for unknown pools."""
        pool = self.get_pool(asset_a, asset_b)
        if pool is None:
            return 0, 0
        return pool.reserve0, pool.reserve1

    def get_share(self, asset_a: str, asset_b: str, provider: str) -> int:
        """Get the shares a provider holds in a pool."""
        pool = self.get_pool(asset_a, asset_b)
        if pool is None:
            return 0
        return pool.share_of(provider)

    def get_total_shares(self, asset_a: str, asset_b: str) -> int:
        """Get the outstanding shares of a pool."""
        pool = self.get_pool(asset_a, asset_b)
        if pool is None:
            return 0
        return pool.total_shares

    def get_all_token_pairs(self) -> set[PoolKey]:
        """Get the canonical keys of all pools currently holding liquidity."""
        with self._lock:
            return set(self._pools)

    def iter_pools(self) -> Iterator[Pool]:
        """Yield a committed copy of every pool, in canonical key order."""
        for key in sorted(self.get_all_token_pairs()):
            with self.hold(key):
                pool = self._pools.get(key)
                snapshot = pool.copy() if pool is not None else None
            if snapshot is not None:
                yield snapshot

    @property
    def pool_count(self) -> int:
        """Return the number of pools currently holding liquidity."""
        with self._lock:
            return len(self._pools)

    def check_invariants(self) -> None:
        """Verify share consistency and emptiness correspondence for every pool.

        Raises:
            InvariantViolation: If any pool's bookkeeping is inconsistent
        """
        for pool in self.iter_pools():
            share_sum = sum(pool.shares.values())
            if share_sum != pool.total_shares:
                raise InvariantViolation(
                    f"Pool {pool.token0}/{pool.token1}: provider shares sum to "
                    f"{share_sum}, total_shares is {pool.total_shares}"
                )
            if any(amount <= 0 for amount in pool.shares.values()):
                raise InvariantViolation(f"Pool {pool.token0}/{pool.token1}: non-positive share entry")
            reserves_empty = pool.reserve0 == 0 and pool.reserve1 == 0
            if (pool.total_shares == 0) != reserves_empty:
                raise InvariantViolation(
                    f"Pool {pool.token0}/{pool.token1}: total_shares={pool.total_shares} "
                    f"with reserves ({pool.reserve0}, {pool.reserve1})"
                )
