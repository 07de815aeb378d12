"""Fixed-point math for pair price accounting."""

from kdex.math.fixed_point import (
    ACCUMULATOR_BITS,
    Q112,
    TIMESTAMP_BITS,
    UQ112x112,
    accumulate,
    average_price,
    cumulative_difference,
    encode,
    encode_price,
    uqdiv,
)

__all__ = [
    "ACCUMULATOR_BITS",
    "Q112",
    "TIMESTAMP_BITS",
    "UQ112x112",
    "accumulate",
    "average_price",
    "cumulative_difference",
    "encode",
    "encode_price",
    "uqdiv",
]
