"""Shared type definitions for addresses and on-chain amounts.

These annotated types are used by the HTTP models; the helpers are used
everywhere an address crosses a boundary.
"""

from typing import Annotated, Any

from pydantic import BeforeValidator, Field

UINT256_MAX = 2**256 - 1


def validate_uint256(value: Any) -> str:
    """Validate that a value is a uint256, returned as a decimal string.

    Raises:
        ValueError: If value is not a non-negative integer within uint256 range
    """
    if isinstance(value, bool):
        raise ValueError("Uint256 cannot be a boolean")
    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        try:
            int_value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint256 must be a decimal integer string: '{value}'") from err
    else:
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if int_value > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")
    return str(int_value)


# Ethereum-style address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]

# 256-bit unsigned integer as decimal string (validated)
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]

# Arbitrary hex bytes
Bytes = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]*$")]


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Normalize an address to lowercase with a 0x prefix.

    Args:
        address: An address (with or without 0x prefix, any case)
        validate: If True, raises ValueError for malformed addresses

    Raises:
        ValueError: If validate=True and address is not a valid address
    """
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr

    if validate and not is_valid_address(addr):
        raise ValueError(f"Invalid address: {address}")

    return addr


def is_valid_address(address: str) -> bool:
    """Check if a string is a well-formed 20-byte hex address."""
    if not isinstance(address, str):
        return False
    if not address.startswith("0x"):
        return False
    if len(address) != 42:
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False


def sort_tokens(token_a: str, token_b: str) -> tuple[str, str]:
    """Order two token addresses canonically (token0 < token1)."""
    a = normalize_address(token_a)
    b = normalize_address(token_b)
    return (a, b) if a < b else (b, a)
