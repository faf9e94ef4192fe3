"""Integer square root.

Used to size the first deposit into an empty pool: the bootstrap share count
is the geometric mean of the two deposited amounts, floor(sqrt(a * b)).
"""

from __future__ import annotations


def isqrt(x: int) -> int:
    """Return floor(sqrt(x)) using the Babylonian method.

    The estimate is seeded at (x + 1) // 2 and refined while it strictly
    decreases. Each step moves the estimate toward sqrt(x) from above, so the
    first non-decreasing step means the floor has been reached.

    Args:
        x: Non-negative integer

    Returns:
        Largest integer y with y * y <= x

    Raises:
        TypeError: If x is not an int
        ValueError: If x is negative
    """
    if isinstance(x, bool) or not isinstance(x, int):
        raise TypeError(f"isqrt requires int, got {type(x).__name__}")
    if x < 0:
        raise ValueError(f"isqrt of negative number: {x}")
    if x == 0:
        return 0

    y = x
    z = (x + 1) // 2
    while z < y:
        y = z
        z = (x // z + z) // 2
    return y
