"""Shared types and HTTP models."""

from dex_client.models.types import (
    ADDRESS_PATTERN,
    UINT256_MAX,
    Address,
    Uint256,
    is_valid_address,
    is_zero_address,
    normalize_address,
    pair_key,
)

__all__ = [
    "ADDRESS_PATTERN",
    "UINT256_MAX",
    "Address",
    "Uint256",
    "is_valid_address",
    "is_zero_address",
    "normalize_address",
    "pair_key",
]
