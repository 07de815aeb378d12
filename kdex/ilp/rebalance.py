"""Rebalance planning for accumulated ILP fees.

Pure functions: given the fee balances and the pair's reserves they decide
whether an upkeep should run, how much of the excess side to swap so the
fees match the pool ratio, and how the result is split between the
treasury's processing cut and the liquidity added back to the pair.

The self-swap sizing follows the pool's spot ratio. When token0 is in
excess (fee0 * reserve1 > fee1 * reserve0):

    amount0_optimal = fee1 * reserve0 / reserve1
    amount_to_swap  = fee0 - amount0_optimal

and symmetrically for token1. The swap moves the pool price, so the fees
after it are close to, but not exactly at, the post-swap ratio; the pair's
mint takes the less generous side and leaves the remainder in the pool.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from kdex.amm.constant_product import FEE_MULTIPLIER, get_amount_out
from kdex.constants import BPS_DENOMINATOR
from kdex.safe_int import S


class UpkeepPhase(str, Enum):
    """Where the ILP manager is in an upkeep; IDLE between calls."""

    IDLE = "idle"
    EVALUATING = "evaluating"
    REBALANCING = "rebalancing"
    DISTRIBUTING = "distributing"


class UpkeepStatus(str, Enum):
    """Outcome of a successful perform_upkeep call."""

    NO_FEES = "no_fees"
    EMPTY_RESERVES = "empty_reserves"
    BELOW_THRESHOLD = "below_threshold"
    EXECUTED = "executed"


def combined_fee_value(fee0: int, fee1: int, reserve0: int, reserve1: int) -> int:
    """Value of both fee balances in token0 units at the spot ratio."""
    return (S(fee0) + S(fee1) * reserve0 // reserve1).value


def evaluate(
    fee0: int,
    fee1: int,
    reserve0: int,
    reserve1: int,
    threshold_value: int,
) -> UpkeepStatus | None:
    """Reason to skip an upkeep, or None when it should run."""
    if fee0 == 0 or fee1 == 0:
        return UpkeepStatus.NO_FEES
    if reserve0 == 0 or reserve1 == 0:
        return UpkeepStatus.EMPTY_RESERVES
    if combined_fee_value(fee0, fee1, reserve0, reserve1) < threshold_value:
        return UpkeepStatus.BELOW_THRESHOLD
    return None


@dataclass(frozen=True)
class SelfSwap:
    """Swap of excess fees through the pair itself."""

    zero_for_one: bool
    amount_in: int
    amount_out: int


@dataclass(frozen=True)
class RebalancePlan:
    """Fee amounts to provide as liquidity, after the optional self-swap."""

    swap: SelfSwap | None
    amount0: int
    amount1: int


def plan_rebalance(
    fee0: int,
    fee1: int,
    reserve0: int,
    reserve1: int,
    fee_multiplier: int = FEE_MULTIPLIER,
) -> RebalancePlan:
    """Size the self-swap that brings the fees to the pool ratio.

    No swap is planned when the fees already match the ratio or when the
    excess is too small to produce any output.
    """
    lhs = S(fee0) * reserve1
    rhs = S(fee1) * reserve0

    if lhs > rhs:
        amount0_optimal = (rhs // reserve1).value
        amount_in = fee0 - amount0_optimal
        amount_out = get_amount_out(amount_in, reserve0, reserve1, fee_multiplier)
        if amount_out > 0:
            return RebalancePlan(
                swap=SelfSwap(zero_for_one=True, amount_in=amount_in, amount_out=amount_out),
                amount0=amount0_optimal,
                amount1=fee1 + amount_out,
            )
    elif rhs > lhs:
        amount1_optimal = (lhs // reserve0).value
        amount_in = fee1 - amount1_optimal
        amount_out = get_amount_out(amount_in, reserve1, reserve0, fee_multiplier)
        if amount_out > 0:
            return RebalancePlan(
                swap=SelfSwap(zero_for_one=False, amount_in=amount_in, amount_out=amount_out),
                amount0=fee0 + amount_out,
                amount1=amount1_optimal,
            )

    return RebalancePlan(swap=None, amount0=fee0, amount1=fee1)


@dataclass(frozen=True)
class Distribution:
    """Per-token processing cut and the remainder added as liquidity."""

    cut0: int
    cut1: int
    liquidity0: int
    liquidity1: int


def split_processing_fee(
    amount0: int,
    amount1: int,
    processing_fee_rate: int,
    bps_denominator: int = BPS_DENOMINATOR,
) -> Distribution:
    cut0 = (S(amount0) * processing_fee_rate // bps_denominator).value
    cut1 = (S(amount1) * processing_fee_rate // bps_denominator).value
    return Distribution(
        cut0=cut0,
        cut1=cut1,
        liquidity0=amount0 - cut0,
        liquidity1=amount1 - cut1,
    )


@dataclass(frozen=True)
class UpkeepResult:
    """What a perform_upkeep call did.

    Attributes:
        status: EXECUTED, or the reason the call was a successful no-op
        pair: Pair the upkeep ran for
        fee0: Ledger balance of token0 when the upkeep started
        fee1: Ledger balance of token1 when the upkeep started
        swap: Self-swap made during rebalancing, if any
        distribution: Processing cut and liquidity amounts, when executed
        liquidity: Shares minted to the treasury
    """

    status: UpkeepStatus
    pair: str
    fee0: int = 0
    fee1: int = 0
    swap: SelfSwap | None = None
    distribution: Distribution | None = None
    liquidity: int = 0

    @property
    def executed(self) -> bool:
        return self.status is UpkeepStatus.EXECUTED
