"""Pydantic models for the ledger HTTP service.

Amounts travel as decimal strings so that uint256 values survive JSON
clients that parse numbers as doubles.
"""

from pydantic import BaseModel, Field

from dex.models.types import Identifier, Uint256


class AddLiquidityRequest(BaseModel):
    """Deposit into a pool."""

    asset_a: Identifier = Field(alias="assetA")
    asset_b: Identifier = Field(alias="assetB")
    amount_a: Uint256 = Field(alias="amountA", description="Deposit of asset A")
    amount_b: Uint256 = Field(alias="amountB", description="Deposit of asset B")
    provider: Identifier

    model_config = {"populate_by_name": True}


class AddLiquidityResponse(BaseModel):
    shares: Uint256 = Field(description="Shares issued to the provider")


class RemoveLiquidityRequest(BaseModel):
    """Redeem shares of a pool."""

    asset_a: Identifier = Field(alias="assetA")
    asset_b: Identifier = Field(alias="assetB")
    shares: Uint256 = Field(description="Shares to burn")
    provider: Identifier

    model_config = {"populate_by_name": True}


class RemoveLiquidityResponse(BaseModel):
    amount_a: Uint256 = Field(alias="amountA", description="Payout of asset A")
    amount_b: Uint256 = Field(alias="amountB", description="Payout of asset B")

    model_config = {"populate_by_name": True}


class SwapRequest(BaseModel):
    """Exact-input swap."""

    asset_in: Identifier = Field(alias="assetIn")
    asset_out: Identifier = Field(alias="assetOut")
    amount_in: Uint256 = Field(alias="amountIn")
    min_amount_out: Uint256 = Field(default="0", alias="minAmountOut", description="Slippage bound")
    trader: Identifier

    model_config = {"populate_by_name": True}


class SwapResponse(BaseModel):
    amount_out: Uint256 = Field(alias="amountOut")

    model_config = {"populate_by_name": True}


class QuoteResponse(BaseModel):
    amount_out: Uint256 = Field(alias="amountOut")

    model_config = {"populate_by_name": True}


class PoolResponse(BaseModel):
    """Committed state of one pool."""

    token0: str
    token1: str
    reserve0: Uint256
    reserve1: Uint256
    total_shares: Uint256 = Field(alias="totalShares")

    model_config = {"populate_by_name": True}


class PoolListResponse(BaseModel):
    pools: list[PoolResponse] = Field(default_factory=list)


class ShareResponse(BaseModel):
    provider: str
    shares: Uint256


class MintRequest(BaseModel):
    """Credit an account in the in-memory token bank."""

    account: Identifier
    amount: Uint256


class BalanceResponse(BaseModel):
    asset: str
    account: str
    balance: Uint256


class ErrorResponse(BaseModel):
    """Body returned for a rejected ledger operation."""

    error: str = Field(description="Error class name, e.g. RatioMismatch")
    detail: str
