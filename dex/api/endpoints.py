"""API endpoints for the ledger service."""

import os

import structlog
from fastapi import APIRouter, Depends

from dex.config import LedgerConfig
from dex.constants import DEFAULT_FEE_BPS
from dex.ledger import Ledger
from dex.models.api import (
    AddLiquidityRequest,
    AddLiquidityResponse,
    BalanceResponse,
    MintRequest,
    PoolListResponse,
    PoolResponse,
    QuoteResponse,
    RemoveLiquidityRequest,
    RemoveLiquidityResponse,
    ShareResponse,
    SwapRequest,
    SwapResponse,
)
from dex.models.types import normalize_address
from dex.pools.pool import Pool
from dex.transfers import TokenBank

logger = structlog.get_logger()

router = APIRouter()


def _create_default_ledger(bank: TokenBank) -> Ledger:
    """Create the service ledger on top of the in-memory token bank.

    The swap fee is configurable via DEX_FEE_BPS (default: 30).
    """
    fee_bps = int(os.environ.get("DEX_FEE_BPS", str(DEFAULT_FEE_BPS)))
    logger.info("ledger_created", fee_bps=fee_bps)
    return Ledger.with_token_bank(bank, LedgerConfig(fee_bps=fee_bps))


_bank = TokenBank()
_ledger = _create_default_ledger(_bank)


def get_token_bank() -> TokenBank:
    """Dependency provider for the token bank behind the default ledger.

    Override this in tests together with get_ledger:
        app.dependency_overrides[get_token_bank] = lambda: bank
    """
    return _bank


def get_ledger() -> Ledger:
    """Dependency provider for the ledger instance.

    Override this in tests to inject a fresh ledger:
        app.dependency_overrides[get_ledger] = lambda: ledger
    """
    return _ledger


def _pool_response(pool: Pool) -> PoolResponse:
    return PoolResponse(
        token0=pool.token0,
        token1=pool.token1,
        reserve0=pool.reserve0,
        reserve1=pool.reserve1,
        total_shares=pool.total_shares,
    )


@router.get("/pools", response_model=PoolListResponse)
def list_pools(ledger: Ledger = Depends(get_ledger)) -> PoolListResponse:
    """List every pool currently holding liquidity."""
    return PoolListResponse(pools=[_pool_response(pool) for pool in ledger.list_pools()])


@router.get("/pools/{asset_a}/{asset_b}", response_model=PoolResponse)
def get_pool(asset_a: str, asset_b: str, ledger: Ledger = Depends(get_ledger)) -> PoolResponse:
    """Reserves and outstanding shares of a pair.

    Pairs without liquidity report zero reserves rather than 404, since an
    empty pool and an unknown pool are the same thing.
    """
    token0, token1 = ledger.registry.canonicalize(asset_a, asset_b)
    pool = ledger.get_pool(asset_a, asset_b) or Pool(token0=token0, token1=token1)
    return _pool_response(pool)


@router.get("/pools/{asset_a}/{asset_b}/shares/{provider}", response_model=ShareResponse)
def get_share(asset_a: str, asset_b: str, provider: str, ledger: Ledger = Depends(get_ledger)) -> ShareResponse:
    """Shares a provider holds in a pair."""
    return ShareResponse(
        provider=normalize_address(provider),
        shares=ledger.get_share(asset_a, asset_b, provider),
    )


@router.get("/quote", response_model=QuoteResponse)
def quote(asset_in: str, asset_out: str, amount_in: int, ledger: Ledger = Depends(get_ledger)) -> QuoteResponse:
    """Price an exact-input swap without executing it."""
    return QuoteResponse(amount_out=ledger.quote(asset_in, asset_out, amount_in))


@router.post("/liquidity/add", response_model=AddLiquidityResponse)
def add_liquidity(request: AddLiquidityRequest, ledger: Ledger = Depends(get_ledger)) -> AddLiquidityResponse:
    """Deposit into a pool.

    Error Handling:
        Ledger errors are rendered by the application's LedgerError handler.
    """
    shares = ledger.add_liquidity(
        request.asset_a,
        request.asset_b,
        int(request.amount_a),
        int(request.amount_b),
        request.provider,
    )
    return AddLiquidityResponse(shares=shares)


@router.post("/liquidity/remove", response_model=RemoveLiquidityResponse)
def remove_liquidity(
    request: RemoveLiquidityRequest, ledger: Ledger = Depends(get_ledger)
) -> RemoveLiquidityResponse:
    """Redeem shares of a pool."""
    amount_a, amount_b = ledger.remove_liquidity(
        request.asset_a,
        request.asset_b,
        int(request.shares),
        request.provider,
    )
    return RemoveLiquidityResponse(amount_a=amount_a, amount_b=amount_b)


@router.post("/swap", response_model=SwapResponse)
def swap(request: SwapRequest, ledger: Ledger = Depends(get_ledger)) -> SwapResponse:
    """Execute an exact-input swap."""
    amount_out = ledger.swap(
        request.asset_in,
        request.asset_out,
        int(request.amount_in),
        int(request.min_amount_out),
        request.trader,
    )
    return SwapResponse(amount_out=amount_out)


@router.post("/tokens/{asset}/mint", response_model=BalanceResponse)
def mint(asset: str, request: MintRequest, bank: TokenBank = Depends(get_token_bank)) -> BalanceResponse:
    """Development faucet: credit an account in the in-memory token bank."""
    bank.mint(asset, request.account, int(request.amount))
    logger.info("tokens_minted", asset=normalize_address(asset), account=request.account, amount=request.amount)
    return BalanceResponse(
        asset=normalize_address(asset),
        account=normalize_address(request.account),
        balance=bank.balance_of(asset, request.account),
    )


@router.get("/tokens/{asset}/balances/{account}", response_model=BalanceResponse)
def balance(asset: str, account: str, bank: TokenBank = Depends(get_token_bank)) -> BalanceResponse:
    """Balance of an account in the in-memory token bank."""
    return BalanceResponse(
        asset=normalize_address(asset),
        account=normalize_address(account),
        balance=bank.balance_of(asset, account),
    )
