"""Test helpers module for shared test utilities.

- constants: Accounts, token addresses and common amounts
- factories: Liquidity/swap flows and test-only contracts
"""

from tests.helpers.constants import (
    E18,
    FEE_TO,
    OTHER,
    OWNER,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
    TOKEN_SUPPLY,
    TREASURY,
    UPKEEP_CALLER,
    WALLET,
)
from tests.helpers.factories import (
    FeeSink,
    FlashBorrower,
    add_liquidity,
    expand_to_18_decimals,
    swap_exact_in,
    token,
)

__all__ = [
    # Constants
    "OWNER",
    "WALLET",
    "OTHER",
    "UPKEEP_CALLER",
    "TREASURY",
    "FEE_TO",
    "TOKEN_A",
    "TOKEN_B",
    "TOKEN_C",
    "E18",
    "TOKEN_SUPPLY",
    # Factories
    "add_liquidity",
    "swap_exact_in",
    "expand_to_18_decimals",
    "token",
    "FlashBorrower",
    "FeeSink",
]
