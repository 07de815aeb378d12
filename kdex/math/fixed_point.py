"""UQ112x112 fixed-point prices and wrapping cumulative accumulators.

Reserve ratios are encoded as unsigned binary fixed-point numbers with 112
integer bits and 112 fractional bits, exactly as the pair contract stores
them. Cumulative prices are sums of `price * seconds` that live in a 224-bit
slot and wrap on overflow; the wrap is part of the contract, not an error.

A consumer computes a time-weighted average price from two samples taken
`t` seconds apart:

    average = cumulative_difference(later, earlier) // t

which is correct across any number of wraps as long as fewer than 2**224
units accumulated between the samples.
"""

from __future__ import annotations

from dataclasses import dataclass

from kdex.safe_int import UINT112_MAX, S, UintOverflow

__all__ = [
    "Q112",
    "RESOLUTION",
    "ACCUMULATOR_BITS",
    "TIMESTAMP_BITS",
    "UQ112x112",
    "encode",
    "uqdiv",
    "encode_price",
    "accumulate",
    "cumulative_difference",
    "average_price",
]

RESOLUTION = 112
Q112 = 1 << RESOLUTION

# Width of the price accumulator slots
ACCUMULATOR_BITS = 224

# Width of the stored block timestamp
TIMESTAMP_BITS = 32


@dataclass(frozen=True)
class UQ112x112:
    """A UQ112x112 value, stored as its raw scaled integer."""

    raw: int

    @classmethod
    def from_ratio(cls, numerator: int, denominator: int) -> UQ112x112:
        """Encode numerator / denominator (both uint112)."""
        return cls(uqdiv(encode(numerator), denominator))

    def scale(self, factor: int) -> int:
        """Multiply the raw value by an integer (e.g. elapsed seconds)."""
        return self.raw * factor

    def floor(self) -> int:
        """Integer part of the value."""
        return self.raw >> RESOLUTION


def encode(y: int) -> int:
    """Encode a uint112 as UQ112x112.

    Raises:
        UintOverflow: If y does not fit in 112 bits
    """
    if y < 0 or y > UINT112_MAX:
        raise UintOverflow(f"Value does not fit in uint112: {y}")
    return y * Q112


def uqdiv(x: int, y: int) -> int:
    """Divide a UQ112x112 by a uint112, returning UQ112x112."""
    return (S(x) // y).value


def encode_price(reserve0: int, reserve1: int) -> tuple[int, int]:
    """Spot prices (token0 in token1, token1 in token0) as UQ112x112."""
    return (
        UQ112x112.from_ratio(reserve1, reserve0).raw,
        UQ112x112.from_ratio(reserve0, reserve1).raw,
    )


def accumulate(cumulative: int, price: UQ112x112, elapsed: int) -> int:
    """Advance a cumulative price by price * elapsed, modulo 2**224."""
    return S(cumulative).wrapping_add(price.scale(elapsed), ACCUMULATOR_BITS).value


def cumulative_difference(later: int, earlier: int) -> int:
    """Difference of two accumulator samples, tolerant of wraparound."""
    return S(later).wrapping_sub(earlier, ACCUMULATOR_BITS).value


def average_price(later: int, earlier: int, elapsed: int) -> UQ112x112:
    """Time-weighted average price between two accumulator samples."""
    return UQ112x112((S(cumulative_difference(later, earlier)) // elapsed).value)
