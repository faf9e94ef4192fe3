"""Constant product pricing (x * y = k) with a fee on the input.

With the default 30 bps fee, 9970/10000 of the input is priced, which floors
to exactly the same amounts as the familiar 997/1000 rule:

    amount_out = amount_in * 997 * reserve_out // (reserve_in * 1000 + amount_in * 997)
"""

from __future__ import annotations

from dex.amm.base import PricingCurve
from dex.constants import DEFAULT_FEE_MULTIPLIER, FEE_DENOMINATOR
from dex.errors import InsufficientLiquidity
from dex.safe_int import S


class ConstantProduct(PricingCurve):
    """Constant product curve.

    Every division floors, so the pool keeps the rounding on both the
    exact-input and exact-output side.
    """

    def get_amount_out(
        self,
        amount_in: int,
        reserve_in: int,
        reserve_out: int,
        fee_multiplier: int = DEFAULT_FEE_MULTIPLIER,
    ) -> int:
        """Output for selling ``amount_in`` into the pool.

        Returns:
            Output amount; 0 when amount_in or either reserve is 0
        """
        if amount_in <= 0 or reserve_in <= 0 or reserve_out <= 0:
            return 0

        priced_in = S(amount_in) * fee_multiplier
        return ((priced_in * reserve_out) // (S(reserve_in) * FEE_DENOMINATOR + priced_in)).value

    def get_amount_in(
        self,
        amount_out: int,
        reserve_in: int,
        reserve_out: int,
        fee_multiplier: int = DEFAULT_FEE_MULTIPLIER,
    ) -> int:
        """Input that buys at least ``amount_out``.

        Returns:
            Input amount; 0 when amount_out or either reserve is 0

        Raises:
            InsufficientLiquidity: If amount_out would take the whole output reserve
        """
        if amount_out <= 0 or reserve_in <= 0 or reserve_out <= 0:
            return 0
        if amount_out >= reserve_out:
            raise InsufficientLiquidity(f"Cannot buy {amount_out} from a reserve of {reserve_out}")

        numerator = S(reserve_in) * amount_out * FEE_DENOMINATOR
        denominator = (S(reserve_out) - amount_out) * fee_multiplier
        # Rounded up by one unit past the floor
        return (numerator // denominator + 1).value


constant_product = ConstantProduct()


__all__ = [
    "ConstantProduct",
    "constant_product",
]
