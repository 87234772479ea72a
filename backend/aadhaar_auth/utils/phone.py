"""
Phone number normalization and validation utilities
"""
import re
import phonenumbers
from phonenumbers import NumberParseException, PhoneNumberFormat
from typing import Optional

from ..core.config import settings


def normalize_phone(phone: str, default_region: Optional[str] = None) -> str:
    """
    Normalize phone number to E.164 format.

    National numbers get the default region's country code (IN -> +91). A
    12-digit number that already starts with 91 but lacks the plus sign is
    treated as international.

    Args:
        phone: Phone number string (can be in various formats)
        default_region: Region code used when no country code is present
            (default: settings.DEFAULT_PHONE_REGION)

    Returns:
        Normalized phone number in E.164 format (e.g., +918085745154)

    Raises:
        ValueError: If phone number cannot be parsed or is not a possible number
    """
    region = default_region or settings.DEFAULT_PHONE_REGION
    raw = (phone or "").strip()
    digits = re.sub(r"\D", "", raw)
    if not digits:
        raise ValueError("Invalid phone number format: no digits")

    if not raw.startswith("+"):
        country_code = phonenumbers.country_code_for_region(region)
        prefix = str(country_code)
        if country_code and digits.startswith(prefix) and len(digits) == len(prefix) + 10:
            raw = f"+{digits}"

    try:
        parsed = phonenumbers.parse(raw, region)
    except NumberParseException as e:
        raise ValueError(f"Invalid phone number format: {str(e)}")

    if not phonenumbers.is_possible_number(parsed):
        raise ValueError("Invalid phone number")

    return phonenumbers.format_number(parsed, PhoneNumberFormat.E164)


def validate_phone(phone: str, default_region: Optional[str] = None) -> bool:
    """Validate phone number without raising exception."""
    try:
        normalize_phone(phone, default_region)
        return True
    except ValueError:
        return False


def get_phone_last4(phone: str) -> str:
    """
    Get last 4 digits of phone number for safe logging.

    Returns:
        Last 4 digits as string, or all digits if fewer than 4
    """
    digits = ''.join(filter(str.isdigit, phone or ""))

    if len(digits) >= 4:
        return digits[-4:]
    return digits
