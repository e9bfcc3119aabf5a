"""
utils/validation_utils.py

Purpose: Input validation

- Wallet address format checks and normalization
- Group-creation field parsing (amount, duration, participants)
- Input sanitization
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from utils.chain_utils import MAX_UINT256, to_base_units
from utils.time_utils import SECONDS_PER_DAY

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")

MIN_PARTICIPANTS = 2
MAX_PARTICIPANTS = 50
MAX_NAME_LENGTH = 64
MAX_DESCRIPTION_LENGTH = 256


def is_hex_address(value: Optional[str]) -> bool:
    """
    Checks for a 0x-prefixed, 40 hex character address (any casing).
    """
    if not value:
        return False
    return bool(ADDRESS_PATTERN.match(value.strip()))


def normalize_address(value: str) -> str:
    """
    Canonical lowercase form used for every address comparison.
    """
    return value.strip().lower()


def addresses_equal(a: Optional[str], b: Optional[str]) -> bool:
    if not a or not b:
        return False
    return normalize_address(a) == normalize_address(b)


def parse_amount(text: str) -> Optional[Decimal]:
    """
    Parses a positive decimal contribution amount.

    Args:
        text: User input (e.g., "0.1")

    Returns:
        Decimal amount, or None if not a positive decimal with at most
        18 fractional digits that fits in a uint256 once scaled
    """
    if not text:
        return None

    try:
        amount = Decimal(text.strip().replace(",", "."))
    except InvalidOperation:
        return None

    if not amount.is_finite() or amount <= 0:
        return None

    try:
        to_base_units(amount)
    except ValueError:
        return None

    return amount


def parse_positive_int(text: str) -> Optional[int]:
    if not text:
        return None

    text = text.strip()
    if not re.match(r"^[0-9]+$", text):
        return None

    value = int(text)
    return value if value > 0 else None


def parse_duration_days(text: str) -> Optional[int]:
    """
    Parses a cycle duration in whole days.

    Returns:
        Number of days, or None if not a positive integer whose length in
        seconds fits in a uint256
    """
    days = parse_positive_int(text)
    if days is None or days * SECONDS_PER_DAY > MAX_UINT256:
        return None
    return days


def parse_participants(text: str) -> Optional[int]:
    """
    Parses the maximum participant count.

    Returns:
        Count within [2, 50], or None otherwise
    """
    value = parse_positive_int(text)
    if value is None or not (MIN_PARTICIPANTS <= value <= MAX_PARTICIPANTS):
        return None
    return value


def sanitize_input(text: str, max_length: int = 1000) -> str:
    """
    Sanitizes free-text input before it is echoed back or encoded on-chain.

    Args:
        text: Input text
        max_length: Maximum allowed length

    Returns:
        Sanitized text
    """
    if not text:
        return ""

    text = text[:max_length]

    # Telegram HTML parse mode treats these as markup
    text = re.sub(r"[<>{}\[\]]", "", text)

    text = " ".join(text.split())

    return text.strip()


def validate_group_name(text: str) -> Optional[str]:
    name = sanitize_input(text, max_length=MAX_NAME_LENGTH)
    return name or None


def validate_group_description(text: str) -> Optional[str]:
    description = sanitize_input(text, max_length=MAX_DESCRIPTION_LENGTH)
    return description or None
