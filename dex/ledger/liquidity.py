"""Liquidity provisioning and withdrawal.

Shares are issued and redeemed with floor division, so rounding always stays
with the pool. A provider can never take out more than the proportional value
of the shares they burn, which keeps repeated deposit/withdraw cycles from
draining the remaining holders.
"""

from __future__ import annotations

import structlog

from dex.config import DEFAULT_LEDGER_CONFIG, LedgerConfig
from dex.errors import InsufficientLiquidity, InsufficientShares, RatioMismatch
from dex.ledger.atomic import atomic_operation
from dex.ledger.events import LiquidityAdded, LiquidityRemoved
from dex.ledger.validation import check_account, check_amount
from dex.math import isqrt
from dex.models.types import normalize_address
from dex.pools.registry import PoolRegistry
from dex.safe_int import S
from dex.transfers import TokenResolver

logger = structlog.get_logger()


def shares_for_deposit(
    amount0: int,
    amount1: int,
    reserve0: int,
    reserve1: int,
    total_shares: int,
) -> int:
    """Calculate the shares a deposit earns.

    An empty pool issues floor(sqrt(amount0 * amount1)). A funded pool only
    accepts deposits in its exact reserve ratio and issues
    floor(amount0 * total_shares / reserve0).

    Args:
        amount0: Deposit of token0
        amount1: Deposit of token1
        reserve0: Current token0 reserve
        reserve1: Current token1 reserve
        total_shares: Current outstanding shares

    Returns:
        Shares to issue (always positive)

    Raises:
        RatioMismatch: If a funded pool's ratio is not matched exactly
        InsufficientShares: If the deposit would issue zero shares
    """
    if total_shares == 0:
        shares = isqrt((S(amount0) * S(amount1)).value)
    else:
        if S(amount0) * S(reserve1) != S(amount1) * S(reserve0):
            raise RatioMismatch(
                f"Deposit ({amount0}, {amount1}) does not match reserve ratio ({reserve0}, {reserve1})"
            )
        shares = ((S(amount0) * S(total_shares)) // S(reserve0)).value

    if shares == 0:
        raise InsufficientShares(f"Deposit ({amount0}, {amount1}) issues zero shares")
    return shares


def amounts_for_shares(share_amount: int, reserve0: int, reserve1: int, total_shares: int) -> tuple[int, int]:
    """Calculate the reserves paid out for burning ``share_amount`` shares (floored)."""
    amount0 = (S(share_amount) * S(reserve0)) // S(total_shares)
    amount1 = (S(share_amount) * S(reserve1)) // S(total_shares)
    return amount0.value, amount1.value


class LiquidityAccounting:
    """Owns reserve and share mutation for deposits and withdrawals."""

    def __init__(
        self,
        registry: PoolRegistry,
        tokens: TokenResolver,
        config: LedgerConfig = DEFAULT_LEDGER_CONFIG,
    ) -> None:
        self.registry = registry
        self.tokens = tokens
        self.config = config

    def add_liquidity(
        self,
        asset_a: str,
        asset_b: str,
        amount_a: int,
        amount_b: int,
        provider: str,
    ) -> LiquidityAdded:
        """Deposit both assets of a pair and issue shares to the provider.

        Args:
            asset_a: One asset of the pair
            asset_b: The other asset of the pair
            amount_a: Deposit of asset_a
            amount_b: Deposit of asset_b
            provider: Account paying the deposit and receiving the shares

        Returns:
            LiquidityAdded record, amounts in canonical order

        Raises:
            InvalidInput: Identical assets, or a non-positive amount
            RatioMismatch: Deposit off the reserve ratio of a funded pool
            InsufficientShares: Deposit too small to issue a share
            TransferFailure: Either pull failed
        """
        key = self.registry.canonicalize(asset_a, asset_b)
        amount_a = check_amount(amount_a, "amount_a", self.config.max_amount)
        amount_b = check_amount(amount_b, "amount_b", self.config.max_amount)
        provider = check_account(provider, "provider")
        token0, token1 = key
        if normalize_address(asset_a) == token0:
            amount0, amount1 = amount_a, amount_b
        else:
            amount0, amount1 = amount_b, amount_a

        with atomic_operation(self.registry, key, self.tokens, self.config.address, "add_liquidity") as op:
            current = self.registry.lookup(key)
            if current is None:
                reserve0 = reserve1 = total_shares = 0
            else:
                reserve0, reserve1, total_shares = current.reserve0, current.reserve1, current.total_shares

            shares = shares_for_deposit(amount0, amount1, reserve0, reserve1, total_shares)

            op.pull(token0, provider, amount0)
            op.pull(token1, provider, amount1)

            pool = op.pool
            pool.reserve0 = (S(pool.reserve0) + S(amount0)).to_uint256()
            pool.reserve1 = (S(pool.reserve1) + S(amount1)).to_uint256()
            pool.total_shares = (S(pool.total_shares) + S(shares)).to_uint256()
            pool.shares[provider] = pool.share_of(provider) + shares

        if total_shares == 0:
            logger.debug(
                "pool_bootstrapped",
                token0=token0,
                token1=token1,
                reserve0=amount0,
                reserve1=amount1,
                shares=shares,
            )

        return LiquidityAdded(
            provider=provider,
            token0=token0,
            token1=token1,
            amount0=amount0,
            amount1=amount1,
            shares_issued=shares,
        )

    def remove_liquidity(
        self,
        asset_a: str,
        asset_b: str,
        share_amount: int,
        provider: str,
    ) -> LiquidityRemoved:
        """Burn a provider's shares and pay out the proportional reserves.

        Args:
            asset_a: One asset of the pair
            asset_b: The other asset of the pair
            share_amount: Shares to burn
            provider: Account holding the shares and receiving the payout

        Returns:
            LiquidityRemoved record, amounts in canonical order

        Raises:
            InvalidInput: Identical assets, or a non-positive share amount
            InsufficientShares: Provider holds fewer than share_amount shares
            InsufficientLiquidity: Either payout would be zero
            TransferFailure: Either push failed
        """
        key = self.registry.canonicalize(asset_a, asset_b)
        share_amount = check_amount(share_amount, "share_amount", self.config.max_amount)
        provider = check_account(provider, "provider")
        token0, token1 = key

        with atomic_operation(self.registry, key, self.tokens, self.config.address, "remove_liquidity") as op:
            pool = self.registry.lookup(key)
            held = pool.share_of(provider) if pool is not None else 0
            if pool is None or held < share_amount:
                raise InsufficientShares(f"Provider {provider} holds {held} shares, tried to redeem {share_amount}")

            amount0, amount1 = amounts_for_shares(share_amount, pool.reserve0, pool.reserve1, pool.total_shares)
            if amount0 == 0 or amount1 == 0:
                raise InsufficientLiquidity(
                    f"Redeeming {share_amount} shares pays out ({amount0}, {amount1}); both must be positive"
                )

            pool.reserve0 = (S(pool.reserve0) - S(amount0)).value
            pool.reserve1 = (S(pool.reserve1) - S(amount1)).value
            pool.total_shares = (S(pool.total_shares) - S(share_amount)).value
            remaining = (S(held) - S(share_amount)).value
            if remaining:
                pool.shares[provider] = remaining
            else:
                del pool.shares[provider]
            self.registry.discard_if_empty(key)

            op.push(token0, provider, amount0)
            op.push(token1, provider, amount1)

        return LiquidityRemoved(
            provider=provider,
            token0=token0,
            token1=token1,
            amount0=amount0,
            amount1=amount1,
            shares_burned=share_amount,
        )
