"""Checked integer wrapper for pair and ledger arithmetic.

Token amounts, reserves and share balances are plain Python ints, which never
overflow. The contracts being modelled, however, store values in fixed-width
unsigned slots (uint112 reserves, uint32 timestamps, uint224 prices,
uint256 everything else). SafeInt keeps the arithmetic honest:

- Division by zero raises DivisionByZero
- Subtraction below zero raises Underflow
- Width checks happen explicitly through to_uint(bits)
- Wraparound happens only where asked for, through wrapping_add(bits)

Usage pattern:
    from kdex.safe_int import S

    def liquidity_for(amount0: int, total_supply: int, reserve0: int) -> int:
        return (S(amount0) * total_supply // reserve0).value
"""

from __future__ import annotations

import math

UINT32_MAX = 2**32 - 1
UINT112_MAX = 2**112 - 1
UINT224_MAX = 2**224 - 1
UINT256_MAX = 2**256 - 1


class SafeIntError(ArithmeticError):
    """Base class for SafeInt arithmetic errors."""

    pass


class DivisionByZero(SafeIntError):
    """Division by zero."""

    pass


class Underflow(SafeIntError):
    """Subtraction would produce a negative result."""

    pass


class UintOverflow(SafeIntError):
    """Value does not fit in the requested unsigned width."""

    pass


class SafeInt:
    """Non-negative integer with checked arithmetic.

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        if isinstance(value, SafeInt):
            self._value = value._value
        elif isinstance(value, int) and not isinstance(value, bool):
            self._value = value
        else:
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")

    @property
    def value(self) -> int:
        """The underlying integer value."""
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __hash__(self) -> int:
        return hash(self._value)

    # --- Arithmetic ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _extract_value(other))

    def __radd__(self, other: int) -> SafeInt:
        return SafeInt(other + self._value)

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Subtract other from self.

        Raises:
            Underflow: If the result would be negative
        """
        other_val = _extract_value(other)
        result = self._value - other_val
        if result < 0:
            raise Underflow(f"Underflow: {self._value} - {other_val} = {result}")
        return SafeInt(result)

    def __rsub__(self, other: int) -> SafeInt:
        result = other - self._value
        if result < 0:
            raise Underflow(f"Underflow: {other} - {self._value} = {result}")
        return SafeInt(result)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _extract_value(other))

    def __rmul__(self, other: int) -> SafeInt:
        return SafeInt(other * self._value)

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Integer division, rounding down.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Division by zero: {self._value} // 0")
        return SafeInt(self._value // other_val)

    # --- Comparison ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _extract_value(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _extract_value(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self._value > _extract_value(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _extract_value(other)

    def __int__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0

    def __index__(self) -> int:
        return self._value

    # --- Named operations ---

    def min(self, other: SafeInt | int) -> SafeInt:
        """Return the smaller of self and other."""
        return SafeInt(min(self._value, _extract_value(other)))

    def isqrt(self) -> SafeInt:
        """Floor square root (matches the Babylonian sqrt used on-chain).

        Raises:
            Underflow: If the value is negative
        """
        if self._value < 0:
            raise Underflow(f"Square root of negative value: {self._value}")
        return SafeInt(math.isqrt(self._value))

    def wrapping_add(self, other: SafeInt | int, bits: int) -> SafeInt:
        """Add modulo 2**bits, the way an unchecked fixed-width slot overflows."""
        return SafeInt((self._value + _extract_value(other)) % (1 << bits))

    def wrapping_sub(self, other: SafeInt | int, bits: int) -> SafeInt:
        """Subtract modulo 2**bits."""
        return SafeInt((self._value - _extract_value(other)) % (1 << bits))

    def to_uint(self, bits: int = 256) -> int:
        """Convert to int, validating that it fits in an unsigned slot of `bits` bits.

        Raises:
            UintOverflow: If the value is negative or exceeds 2**bits - 1
        """
        if self._value < 0:
            raise UintOverflow(f"Negative value cannot be uint{bits}: {self._value}")
        if self._value >= 1 << bits:
            raise UintOverflow(f"Value exceeds uint{bits} max: {self._value}")
        return self._value

    def is_uint(self, bits: int = 256) -> bool:
        """Check whether the value fits in uint{bits} without raising."""
        return 0 <= self._value < 1 << bits

    @classmethod
    def zero(cls) -> SafeInt:
        return cls(0)


def _extract_value(x: SafeInt | int) -> int:
    if isinstance(x, SafeInt):
        return x._value
    return x


# Convenience alias for concise code
S = SafeInt
