"""Constant-product (x * y = k) pricing with the 0.36% LP fee.

These are the pure formulas the pair enforces and the rebalance engine uses
to price its self-swap. With the default fee multiplier of 9964:

    amount_out = (in * 9964 * reserve_out) / (reserve_in * 10000 + in * 9964)

All results round down except get_amount_in, which rounds up so the
returned input always suffices.
"""

from __future__ import annotations

from kdex.config import DEFAULT_ENGINE_CONFIG
from kdex.safe_int import UINT256_MAX, S

FEE_MULTIPLIER = DEFAULT_ENGINE_CONFIG.fee_multiplier
BPS = DEFAULT_ENGINE_CONFIG.bps_denominator


def get_amount_out(
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    fee_multiplier: int = FEE_MULTIPLIER,
) -> int:
    """Output amount for an exact input.

    Args:
        amount_in: Input token amount (net of any ILP fee)
        reserve_in: Reserve of input token in pool
        reserve_out: Reserve of output token in pool
        fee_multiplier: 10000 - LP fee in bps (default 9964 for 0.36%)

    Returns:
        Output token amount, or 0 for a zero input or an empty pool
    """
    if amount_in <= 0:
        return 0
    if reserve_in <= 0 or reserve_out <= 0:
        return 0

    amount_in_with_fee = S(amount_in) * fee_multiplier
    numerator = amount_in_with_fee * reserve_out
    denominator = S(reserve_in) * BPS + amount_in_with_fee

    return (numerator // denominator).value


def get_amount_in(
    amount_out: int,
    reserve_in: int,
    reserve_out: int,
    fee_multiplier: int = FEE_MULTIPLIER,
) -> int:
    """Input required for an exact output (rounded up).

    Returns:
        Required input amount, 0 for a zero output or an empty pool, and
        UINT256_MAX when the output would drain the reserve
    """
    if amount_out <= 0:
        return 0
    if reserve_in <= 0 or reserve_out <= 0:
        return 0
    if amount_out >= reserve_out:
        return UINT256_MAX

    numerator = S(reserve_in) * amount_out * BPS
    denominator = (S(reserve_out) - amount_out) * fee_multiplier

    return ((numerator // denominator) + 1).value


def quote(amount_a: int, reserve_a: int, reserve_b: int) -> int:
    """Amount of B equal in value to amount_a of A at the pool's spot ratio."""
    return (S(amount_a) * reserve_b // reserve_a).value


def initial_liquidity(amount0: int, amount1: int, minimum_liquidity: int) -> int:
    """Shares for the first deposit, net of the permanently locked minimum.

    Returns 0 when the geometric mean does not exceed the locked minimum.
    """
    root = (S(amount0) * amount1).isqrt()
    if root <= minimum_liquidity:
        return 0
    return (root - minimum_liquidity).value


def proportional_liquidity(
    amount0: int,
    amount1: int,
    reserve0: int,
    reserve1: int,
    total_supply: int,
) -> int:
    """Shares for a deposit into a funded pool; the less generous side wins."""
    share0 = S(amount0) * total_supply // reserve0
    share1 = S(amount1) * total_supply // reserve1
    return share0.min(share1).value


def protocol_fee_liquidity(
    total_supply: int,
    root_k: int,
    root_k_last: int,
    denominator: int,
) -> int:
    """Shares owed to the protocol for sqrt(k) growth since the last checkpoint.

    liquidity = total_supply * (root_k - root_k_last) / (denominator * root_k + root_k_last)
    """
    numerator = S(total_supply) * (S(root_k) - root_k_last)
    return (numerator // (S(root_k) * denominator + root_k_last)).value


def k_invariant_holds(
    balance0: int,
    balance1: int,
    net_amount0_in: int,
    net_amount1_in: int,
    reserve0: int,
    reserve1: int,
    lp_fee_bps: int,
) -> bool:
    """Check the fee-adjusted post-swap balances against the pre-swap product.

    `net_amount*_in` are the inputs left after the ILP fee; the LP fee is
    charged on them by scaling the balances by 10000 and subtracting
    lp_fee_bps per unit of input.
    """
    adjusted0 = S(balance0) * BPS - S(net_amount0_in) * lp_fee_bps
    adjusted1 = S(balance1) * BPS - S(net_amount1_in) * lp_fee_bps
    return adjusted0 * adjusted1 >= S(reserve0) * reserve1 * (BPS * BPS)
