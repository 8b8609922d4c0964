"""
Phone Utilities
===============
Validation, E.164 formatting and log masking for Indian mobile numbers.
"""

import re

# 10 digits, leading digit 6-9
MOBILE_PATTERN = re.compile(r"^[6-9][0-9]{9}$")
OTP_PATTERN = re.compile(r"^[0-9]{6}$")


def is_valid_mobile(phone: str) -> bool:
    """
    Check a national mobile number.

    Args:
        phone: Phone number without country prefix

    Returns:
        True if the number is 10 digits starting with 6, 7, 8 or 9
    """
    if not isinstance(phone, str):
        return False
    return bool(MOBILE_PATTERN.fullmatch(phone))


def is_valid_otp_format(code: str) -> bool:
    """True if ``code`` is exactly six ASCII digits."""
    if not isinstance(code, str):
        return False
    return bool(OTP_PATTERN.fullmatch(code))


def to_e164(phone: str, country_code: str = "+91") -> str:
    """
    Prefix a national number with the country code.

    Args:
        phone: National number (already validated)
        country_code: Country code including "+"

    Returns:
        E.164 formatted number
    """
    if phone.startswith("+"):
        return phone
    prefix = country_code if country_code.startswith("+") else f"+{country_code}"
    return f"{prefix}{phone}"


def mask_phone(phone: str) -> str:
    """Mask a phone number for logs, keeping the first and last two digits."""
    if not phone:
        return ""
    if len(phone) <= 4:
        return "*" * len(phone)
    return f"{phone[:2]}{'*' * (len(phone) - 4)}{phone[-2:]}"
