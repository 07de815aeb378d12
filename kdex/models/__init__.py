"""Shared types, event records and HTTP models."""

from kdex.models.types import (
    Address,
    Bytes,
    Uint256,
    is_valid_address,
    normalize_address,
    sort_tokens,
)

__all__ = [
    "Address",
    "Bytes",
    "Uint256",
    "is_valid_address",
    "normalize_address",
    "sort_tokens",
]
