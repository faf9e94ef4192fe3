"""Swap pricing and execution against a pool's reserves."""

from __future__ import annotations

from dex.amm.base import PricingCurve
from dex.amm.constant_product import constant_product
from dex.config import DEFAULT_LEDGER_CONFIG, LedgerConfig
from dex.errors import InsufficientLiquidity, InvariantViolation, SlippageExceeded
from dex.ledger.atomic import atomic_operation
from dex.ledger.events import Swapped
from dex.ledger.validation import check_account, check_amount
from dex.models.types import normalize_address
from dex.pools.registry import PoolRegistry
from dex.safe_int import S
from dex.transfers import TokenResolver


class SwapEngine:
    """Prices and executes trades with the fee-adjusted constant product formula.

    Both trade directions read and write the pool's single canonical
    (reserve0, reserve1) pair; the input/output view is derived per call.
    """

    def __init__(
        self,
        registry: PoolRegistry,
        tokens: TokenResolver,
        config: LedgerConfig = DEFAULT_LEDGER_CONFIG,
        amm: PricingCurve = constant_product,
    ) -> None:
        self.registry = registry
        self.tokens = tokens
        self.config = config
        self.amm = amm

    def quote(self, asset_in: str, asset_out: str, amount_in: int) -> int:
        """Price an exact-input swap without executing it.

        Returns 0 for pools without liquidity instead of failing.

        Raises:
            InvalidInput: Identical assets or a malformed amount
        """
        self.registry.canonicalize(asset_in, asset_out)
        amount_in = check_amount(amount_in, "amount_in", self.config.max_amount, allow_zero=True)

        pool = self.registry.get_pool(asset_in, asset_out)
        if pool is None:
            return 0
        return self.amm.simulate_swap(pool, asset_in, amount_in, self.config.fee_multiplier).amount_out

    def quote_amount_in(self, asset_in: str, asset_out: str, amount_out: int) -> int:
        """Price the input needed to receive ``amount_out`` (rounded up).

        Returns 0 for pools without liquidity.

        Raises:
            InvalidInput: Identical assets or a malformed amount
            InsufficientLiquidity: amount_out would drain the output reserve
        """
        self.registry.canonicalize(asset_in, asset_out)
        amount_out = check_amount(amount_out, "amount_out", self.config.max_amount, allow_zero=True)

        pool = self.registry.get_pool(asset_in, asset_out)
        if pool is None:
            return 0
        reserve_in, reserve_out = pool.get_reserves(asset_in)
        return self.amm.get_amount_in(amount_out, reserve_in, reserve_out, self.config.fee_multiplier)

    def swap(
        self,
        asset_in: str,
        asset_out: str,
        amount_in: int,
        min_amount_out: int,
        trader: str,
    ) -> Swapped:
        """Execute an exact-input swap.

        Args:
            asset_in: Asset paid by the trader
            asset_out: Asset received by the trader
            amount_in: Amount of asset_in to sell
            min_amount_out: Smallest acceptable output (slippage bound)
            trader: Account paying and receiving

        Returns:
            Swapped record

        Raises:
            InvalidInput: Identical assets, or a malformed amount
            InsufficientLiquidity: Empty reserves, or an output that rounds to zero
            SlippageExceeded: Output below min_amount_out
            TransferFailure: The pull or the push failed
        """
        key = self.registry.canonicalize(asset_in, asset_out)
        amount_in = check_amount(amount_in, "amount_in", self.config.max_amount)
        min_amount_out = check_amount(min_amount_out, "min_amount_out", self.config.max_amount, allow_zero=True)
        trader = check_account(trader, "trader")
        token_in = normalize_address(asset_in)

        with atomic_operation(self.registry, key, self.tokens, self.config.address, "swap") as op:
            pool = self.registry.lookup(key)
            if pool is None or pool.reserve0 == 0 or pool.reserve1 == 0:
                raise InsufficientLiquidity(f"Pool {key[0]}/{key[1]} has no liquidity")

            quote = self.amm.simulate_swap(pool, token_in, amount_in, self.config.fee_multiplier)
            if quote.amount_out == 0:
                raise InsufficientLiquidity(f"Swapping {amount_in} {token_in} yields zero output")
            if quote.amount_out < min_amount_out:
                raise SlippageExceeded(f"Output {quote.amount_out} is below minimum {min_amount_out}")

            op.pull(quote.token_in, trader, amount_in)

            new_reserve_in = (S(quote.reserve_in) + S(amount_in)).to_uint256()
            new_reserve_out = (S(quote.reserve_out) - S(quote.amount_out)).value
            if S(new_reserve_in) * S(new_reserve_out) < S(quote.reserve_in) * S(quote.reserve_out):
                raise InvariantViolation(
                    f"Swap would decrease the constant product of {key[0]}/{key[1]}"
                )
            pool.set_reserves(quote.token_in, new_reserve_in, new_reserve_out)

            op.push(quote.token_out, trader, quote.amount_out)

        return Swapped(
            trader=trader,
            asset_in=quote.token_in,
            asset_out=quote.token_out,
            amount_in=amount_in,
            amount_out=quote.amount_out,
        )
