"""Swap pricing curves."""

from dex.amm.base import PricingCurve, SwapQuote
from dex.amm.constant_product import ConstantProduct, constant_product

__all__ = [
    "PricingCurve",
    "SwapQuote",
    "ConstantProduct",
    "constant_product",
]
