"""Checked integer arithmetic for reserves, shares and amounts.

Ledger quantities are unsigned. A result that would go negative is an error,
never a value to clamp, so the arithmetic that moves reserves and shares goes
through SafeInt and the enclosing atomic operation rolls back when it raises.

    from dex.safe_int import S

    shares = (S(amount0) * S(total_shares)) // S(reserve0)
    reserve0 = (S(reserve0) - S(amount0)).to_uint256()
"""

from __future__ import annotations

from dex.constants import UINT256_MAX


class SafeIntError(ArithmeticError):
    """Checked arithmetic failed."""


class DivisionByZero(SafeIntError):
    pass


class Underflow(SafeIntError):
    """A subtraction went below zero."""


class Uint256Overflow(SafeIntError):
    """A value does not fit in 256 unsigned bits."""


def _as_int(operand: SafeInt | int) -> int:
    return operand._value if isinstance(operand, SafeInt) else operand


class SafeInt:
    """Non-clamping integer wrapper; ``value`` is the plain int."""

    __slots__ = ("_value",)

    def __init__(self, value: int | SafeInt) -> None:
        if isinstance(value, SafeInt):
            value = value._value
        # bool is an int subclass, but never a quantity
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")
        self._value = value

    @classmethod
    def zero(cls) -> SafeInt:
        return cls(0)

    @property
    def value(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"S({self._value})"

    def __hash__(self) -> int:
        return hash(self._value)

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _as_int(other))

    __radd__ = __add__

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _as_int(other))

    __rmul__ = __mul__

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Raises Underflow instead of returning a negative value."""
        subtrahend = _as_int(other)
        if subtrahend > self._value:
            raise Underflow(f"{self._value} - {subtrahend} is negative")
        return SafeInt(self._value - subtrahend)

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Floor division; raises DivisionByZero for a zero divisor."""
        divisor = _as_int(other)
        if divisor == 0:
            raise DivisionByZero(f"{self._value} // 0")
        return SafeInt(self._value // divisor)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (SafeInt, int)):
            return self._value == _as_int(other)
        return NotImplemented

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _as_int(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _as_int(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self._value > _as_int(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _as_int(other)

    def __bool__(self) -> bool:
        return self._value != 0

    def __int__(self) -> int:
        return self._value

    __index__ = __int__

    def is_uint256(self) -> bool:
        return 0 <= self._value <= UINT256_MAX

    def to_uint256(self) -> int:
        """Unwrap a value that is about to be stored.

        Raises:
            Uint256Overflow: If the value is outside [0, 2^256 - 1]
        """
        if not self.is_uint256():
            raise Uint256Overflow(f"{self._value} is outside the uint256 range")
        return self._value


S = SafeInt
