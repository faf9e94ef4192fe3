"""Pool record: reserve and share bookkeeping for one canonical pair."""

from __future__ import annotations

from dataclasses import dataclass, field

from dex.errors import InvalidInput
from dex.models.types import normalize_address

PoolKey = tuple[str, str]


@dataclass
class Pool:
    """Reserve/share ledger entry for one canonical asset pair.

    A single (reserve0, reserve1) pair is stored per key. The reserve for a
    given asset is derived by comparing it against token0/token1, never kept
    twice for the two trade directions.
    """

    token0: str
    token1: str
    reserve0: int = 0
    reserve1: int = 0
    total_shares: int = 0
    # provider -> shares; providers whose balance reaches zero are dropped
    shares: dict[str, int] = field(default_factory=dict)

    @property
    def key(self) -> PoolKey:
        return (self.token0, self.token1)

    @property
    def is_empty(self) -> bool:
        return self.total_shares == 0

    def get_reserves(self, token_in: str) -> tuple[int, int]:
        """Get reserves ordered as (reserve_in, reserve_out)."""
        token_in_norm = normalize_address(token_in)
        if token_in_norm == self.token0:
            return self.reserve0, self.reserve1
        elif token_in_norm == self.token1:
            return self.reserve1, self.reserve0
        else:
            raise InvalidInput(f"Token {token_in} not in pool")

    def set_reserves(self, token_in: str, reserve_in: int, reserve_out: int) -> None:
        """Store reserves given in (reserve_in, reserve_out) order."""
        token_in_norm = normalize_address(token_in)
        if token_in_norm == self.token0:
            self.reserve0, self.reserve1 = reserve_in, reserve_out
        elif token_in_norm == self.token1:
            self.reserve1, self.reserve0 = reserve_in, reserve_out
        else:
            raise InvalidInput(f"Token {token_in} not in pool")

    def get_token_out(self, token_in: str) -> str:
        """Get the output token for a given input token."""
        token_in_norm = normalize_address(token_in)
        if token_in_norm == self.token0:
            return self.token1
        elif token_in_norm == self.token1:
            return self.token0
        else:
            raise InvalidInput(f"Token {token_in} not in pool")

    def share_of(self, provider: str) -> int:
        return self.shares.get(normalize_address(provider), 0)

    def copy(self) -> Pool:
        """Independent copy, safe to hand out or keep as a rollback snapshot."""
        return Pool(
            token0=self.token0,
            token1=self.token1,
            reserve0=self.reserve0,
            reserve1=self.reserve1,
            total_shares=self.total_shares,
            shares=dict(self.shares),
        )
