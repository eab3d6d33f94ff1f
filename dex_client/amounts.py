"""Conversion between human decimal strings and integer base units.

Base-unit amounts are plain Python ints (arbitrary precision). No code path
here goes through float: parsing is done on the digit string itself.
"""

from __future__ import annotations

import re

from dex_client.constants import BPS_DENOMINATOR
from dex_client.errors import MalformedAmount
from dex_client.models.types import UINT256_MAX

# Largest precision whose scale factor still fits in a uint256
MAX_DECIMALS = 77

_DECIMAL_RE = re.compile(r"^(?:([0-9]+)(?:\.([0-9]*))?|\.([0-9]+))$")


def _check_decimals(decimals: int) -> None:
    if isinstance(decimals, bool) or not isinstance(decimals, int):
        raise TypeError(f"decimals must be int, got {type(decimals).__name__}")
    if not 0 <= decimals <= MAX_DECIMALS:
        raise ValueError(f"decimals must be in [0, {MAX_DECIMALS}], got {decimals}")


def to_base_units(amount: str, decimals: int) -> int:
    """Scale a non-negative decimal numeral to integer base units.

    Trailing fractional zeros beyond ``decimals`` are accepted since they do
    not change the value; any other excess precision is rejected rather than
    truncated.

    Args:
        amount: Decimal numeral such as "1.5", "0.000001", "42" or ".5"
        decimals: Asset precision

    Returns:
        Amount in base units

    Raises:
        MalformedAmount: If the string is not a valid non-negative numeral, is
            more precise than ``decimals`` allows, or exceeds uint256
    """
    _check_decimals(decimals)
    if not isinstance(amount, str):
        raise MalformedAmount(f"Amount must be a string, got {type(amount).__name__}")

    text = amount.strip()
    match = _DECIMAL_RE.match(text)
    if match is None:
        raise MalformedAmount(f"Not a non-negative decimal numeral: '{amount}'")

    whole = match.group(1) or "0"
    frac = (match.group(2) if match.group(1) is not None else match.group(3)) or ""
    frac = frac.rstrip("0")
    if len(frac) > decimals:
        raise MalformedAmount(
            f"Amount '{amount}' has {len(frac)} fractional digits, asset allows {decimals}"
        )

    value = int(whole) * 10**decimals + int(frac.ljust(decimals, "0") or "0")
    if value > UINT256_MAX:
        raise MalformedAmount(f"Amount '{amount}' exceeds uint256")
    return value


def to_display_string(amount: int, decimals: int) -> str:
    """Format base units as a decimal string with exactly ``decimals`` digits.

    >>> to_display_string(1500000, 6)
    '1.500000'
    """
    _check_decimals(decimals)
    if amount < 0:
        raise ValueError(f"Base-unit amount cannot be negative: {amount}")
    if decimals == 0:
        return str(amount)
    whole, frac = divmod(amount, 10**decimals)
    return f"{whole}.{frac:0{decimals}d}"


def apply_slippage(amount_out: int, slippage_bps: int) -> int:
    """Minimum acceptable output for a quoted amount.

    Computed as ``amount_out * (10000 - bps) // 10000`` so the result never
    exceeds the quote. For whole-percent tolerances this is identical to
    ``amount_out * (100 - pct) // 100``.

    Raises:
        ValueError: If the tolerance is outside [0, 10000) or the amount is negative
    """
    if not 0 <= slippage_bps < BPS_DENOMINATOR:
        raise ValueError(f"slippage_bps must be in [0, {BPS_DENOMINATOR}), got {slippage_bps}")
    if amount_out < 0:
        raise ValueError(f"Quoted amount cannot be negative: {amount_out}")
    return amount_out * (BPS_DENOMINATOR - slippage_bps) // BPS_DENOMINATOR


__all__ = ["MAX_DECIMALS", "to_base_units", "to_display_string", "apply_slippage"]
