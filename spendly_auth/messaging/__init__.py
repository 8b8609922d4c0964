"""
Messaging Helpers
=================
Phone number handling and SMS message text.
"""

from .phone_utils import (
    MOBILE_PATTERN,
    OTP_PATTERN,
    is_valid_mobile,
    is_valid_otp_format,
    to_e164,
    mask_phone,
)
from .templates import otp_message

__all__ = [
    "MOBILE_PATTERN",
    "OTP_PATTERN",
    "is_valid_mobile",
    "is_valid_otp_format",
    "to_e164",
    "mask_phone",
    "otp_message",
]
