"""Pydantic models and shared types for the ledger service."""

from dex.models.api import (
    AddLiquidityRequest,
    AddLiquidityResponse,
    BalanceResponse,
    ErrorResponse,
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
from dex.models.types import Identifier, Uint256, is_valid_address, normalize_address

__all__ = [
    # Requests
    "AddLiquidityRequest",
    "RemoveLiquidityRequest",
    "SwapRequest",
    "MintRequest",
    # Responses
    "AddLiquidityResponse",
    "RemoveLiquidityResponse",
    "SwapResponse",
    "QuoteResponse",
    "PoolResponse",
    "PoolListResponse",
    "ShareResponse",
    "BalanceResponse",
    "ErrorResponse",
    # Types
    "Identifier",
    "Uint256",
    "normalize_address",
    "is_valid_address",
]
