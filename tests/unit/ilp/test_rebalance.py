"""Tests for upkeep evaluation and rebalance planning."""

import pytest

from kdex.ilp import (
    Distribution,
    SelfSwap,
    UpkeepStatus,
    combined_fee_value,
    evaluate,
    plan_rebalance,
    split_processing_fee,
)

E18 = 10**18

# get_amount_out(2e18, 10e18, 10e18)
SWAP_OUT = 1661663664865586018


class TestEvaluate:
    def test_combined_fee_value_in_token0_units(self):
        assert combined_fee_value(3 * E18, E18, 10 * E18, 5 * E18) == 5 * E18

    @pytest.mark.parametrize(("fee0", "fee1"), [(0, 0), (E18, 0), (0, E18)])
    def test_no_fees(self, fee0, fee1):
        assert evaluate(fee0, fee1, 10 * E18, 10 * E18, 0) is UpkeepStatus.NO_FEES

    def test_empty_reserves(self):
        assert evaluate(E18, E18, 0, 10 * E18, 0) is UpkeepStatus.EMPTY_RESERVES

    def test_below_threshold(self):
        assert evaluate(E18, E18, 10 * E18, 10 * E18, 2 * E18 + 1) is UpkeepStatus.BELOW_THRESHOLD

    def test_at_threshold_runs(self):
        assert evaluate(E18, E18, 10 * E18, 10 * E18, 2 * E18) is None


class TestPlanRebalance:
    def test_excess_token0(self):
        """fee0 3e18 vs fee1 1e18 at a 1:1 pool: swap 2e18 token0."""
        plan = plan_rebalance(3 * E18, E18, 10 * E18, 10 * E18)
        assert plan.swap == SelfSwap(zero_for_one=True, amount_in=2 * E18, amount_out=SWAP_OUT)
        assert (plan.amount0, plan.amount1) == (E18, E18 + SWAP_OUT)

    def test_excess_token1(self):
        plan = plan_rebalance(E18, 3 * E18, 10 * E18, 10 * E18)
        assert plan.swap == SelfSwap(zero_for_one=False, amount_in=2 * E18, amount_out=SWAP_OUT)
        assert (plan.amount0, plan.amount1) == (E18 + SWAP_OUT, E18)

    def test_balanced_fees_need_no_swap(self):
        plan = plan_rebalance(E18, 2 * E18, 5 * E18, 10 * E18)
        assert plan.swap is None
        assert (plan.amount0, plan.amount1) == (E18, 2 * E18)

    def test_dust_excess_is_not_swapped(self):
        """An excess too small to buy anything stays on its side."""
        plan = plan_rebalance(2, 1, E18, E18)
        assert plan.swap is None
        assert (plan.amount0, plan.amount1) == (2, 1)


class TestSplitProcessingFee:
    def test_one_percent(self):
        assert split_processing_fee(E18, 3 * E18, 100) == Distribution(
            cut0=E18 // 100,
            cut1=3 * E18 // 100,
            liquidity0=E18 - E18 // 100,
            liquidity1=3 * E18 - 3 * E18 // 100,
        )

    def test_zero_rate(self):
        assert split_processing_fee(7, 9, 0) == Distribution(
            cut0=0, cut1=0, liquidity0=7, liquidity1=9
        )

    def test_cut_rounds_down(self):
        assert split_processing_fee(99, 99, 100).cut0 == 0
