"""Constant-product AMM math."""

from kdex.amm.constant_product import (
    get_amount_in,
    get_amount_out,
    initial_liquidity,
    k_invariant_holds,
    proportional_liquidity,
    protocol_fee_liquidity,
    quote,
)

__all__ = [
    "get_amount_in",
    "get_amount_out",
    "initial_liquidity",
    "k_invariant_holds",
    "proportional_liquidity",
    "protocol_fee_liquidity",
    "quote",
]
