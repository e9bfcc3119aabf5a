"""
utils/chain_utils.py

Purpose: On-chain value helpers

- Fixed 18-decimal conversion between base units and display decimals
- Zero-address detection
- Short address rendering for chat messages
"""

from decimal import Decimal, ROUND_DOWN, localcontext
from typing import Optional, Union

DECIMALS = 18
UNIT = Decimal(10) ** DECIMALS
ZERO_ADDRESS = "0x" + "0" * 40
MAX_UINT256 = 2 ** 256 - 1


def to_base_units(amount: Union[Decimal, str, int]) -> int:
    """
    Converts a human-readable amount to the contract's smallest unit.

    Raises:
        ValueError: If the amount is negative, has more than 18 fractional
            digits or does not fit in a uint256
    """
    amount = Decimal(str(amount))
    if not amount.is_finite():
        raise ValueError("Amount must be a finite number")
    if amount.adjusted() > 78:
        raise ValueError("Amount is too large")

    # Exact: scaling by 10**18 keeps every coefficient digit
    with localcontext() as ctx:
        ctx.prec = len(amount.as_tuple().digits) + DECIMALS
        value = amount * UNIT

    if value < 0:
        raise ValueError("Amount cannot be negative")
    if value != value.to_integral_value():
        raise ValueError("Amount has more than 18 decimal places")
    if value > MAX_UINT256:
        raise ValueError("Amount is too large")
    return int(value)


def from_base_units(value: int) -> Decimal:
    """
    Converts a smallest-unit integer into a display decimal.
    """
    return Decimal(int(value)) / UNIT


def format_amount(value: int, symbol: str = "HBAR", places: int = 6) -> str:
    """
    Renders a smallest-unit amount, e.g. 100000000000000000 -> "0.1 HBAR".
    """
    quantum = Decimal(1).scaleb(-places)
    amount = from_base_units(value).quantize(quantum, rounding=ROUND_DOWN)
    text = format(amount.normalize(), "f")
    return f"{text} {symbol}"


def is_zero_address(address: Optional[str]) -> bool:
    if not address:
        return True
    return address.strip().lower() == ZERO_ADDRESS


def short_address(address: Optional[str]) -> str:
    """0xabcdef...1234 style rendering."""
    if not address:
        return "N/A"
    return f"{address[:6]}...{address[-4:]}" if len(address) > 12 else address
