"""Protocol constants for the KDEX pair engine.

Centralizes well-known addresses and protocol parameters.
"""

from kdex.models.types import is_valid_address

# Shares minted to ZERO_ADDRESS on the first deposit and never redeemable
MINIMUM_LIQUIDITY = 10**3

# Basis-point scale shared by every fee in the system
BPS_DENOMINATOR = 10_000

# Liquidity-provider fee: 0.36% of swap input, i.e. multiplier 9964/10000
LP_FEE_BPS = 36

# ILP fee rates are accepted in [0, 200] bp per input side
MAX_ILP_FEE_RATE = 200

# Processing cut can be anything up to the full amount
MAX_PROCESSING_FEE_RATE = BPS_DENOMINATOR

# Protocol takes sqrt(k) growth / (5 * sqrt(k) + sqrt(kLast)), i.e. 1/6 of LP fees
PROTOCOL_FEE_DENOMINATOR = 5

# Share token metadata
SHARE_TOKEN_NAME = "KDEX V2"
SHARE_TOKEN_SYMBOL = "KDEX-V2"
SHARE_TOKEN_DECIMALS = 18


def _validate_address(name: str, address: str) -> str:
    """Validate and return a well-known address.

    Raises:
        ValueError: If the address is invalid
    """
    if not is_valid_address(address):
        raise ValueError(f"Invalid {name} address: {address} (must be 0x + 40 hex chars)")
    return address


# Burn address for locked liquidity, also the "unset" value of address settings
ZERO_ADDRESS = _validate_address("zero", "0x" + "0" * 40)
