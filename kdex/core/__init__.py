"""Pair engine: pairs, their registry, and the shared role table."""

from kdex.core.factory import Factory, FactoryState
from kdex.core.interfaces import FeeDepositTarget, FlashSwapCallee, PairRegistry
from kdex.core.pair import Pair, PairState
from kdex.core.permissions import GLOBAL_SCOPE, ILP_ADMIN_ROLES, Permissions, Role
from kdex.core.reserves import ReserveLedger

__all__ = [
    "GLOBAL_SCOPE",
    "ILP_ADMIN_ROLES",
    "Factory",
    "FactoryState",
    "FeeDepositTarget",
    "FlashSwapCallee",
    "Pair",
    "PairRegistry",
    "PairState",
    "Permissions",
    "ReserveLedger",
    "Role",
]
