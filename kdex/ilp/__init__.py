"""ILP fee collection and the rebalancing upkeep."""

from kdex.ilp.ledger import FeeLedger
from kdex.ilp.manager import ILPManager, ILPManagerState, decode_perform_data, encode_perform_data
from kdex.ilp.rebalance import (
    Distribution,
    RebalancePlan,
    SelfSwap,
    UpkeepPhase,
    UpkeepResult,
    UpkeepStatus,
    combined_fee_value,
    evaluate,
    plan_rebalance,
    split_processing_fee,
)

__all__ = [
    "Distribution",
    "FeeLedger",
    "ILPManager",
    "ILPManagerState",
    "RebalancePlan",
    "SelfSwap",
    "UpkeepPhase",
    "UpkeepResult",
    "UpkeepStatus",
    "combined_fee_value",
    "decode_perform_data",
    "encode_perform_data",
    "evaluate",
    "plan_rebalance",
    "split_processing_fee",
]
