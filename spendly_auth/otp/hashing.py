"""
OTP Hashing Utilities
=====================
Code generation and keyed digests for OTP codes.
"""

import hashlib
import hmac
import secrets


def generate_otp(length: int = 6) -> str:
    """
    Generate a numeric OTP with no leading zero.

    Args:
        length: Number of digits

    Returns:
        OTP string in ``[10**(length-1), 10**length - 1]``
    """
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(10 ** length - low))


def generate_salt() -> str:
    """Generate a random salt for OTP hashing."""
    return secrets.token_hex(16)


def hash_otp(otp: str, salt: str, secret: str) -> str:
    """
    Hash an OTP with HMAC-SHA256.

    Args:
        otp: Plain OTP
        salt: Per-record random salt
        secret: Server-side key

    Returns:
        Hex digest
    """
    return hmac.new(
        secret.encode(),
        f"{salt}:{otp}".encode(),
        hashlib.sha256,
    ).hexdigest()


def verify_otp_hash(otp: str, salt: str, stored_hash: str, secret: str) -> bool:
    """
    Verify an OTP against its digest.

    Uses constant-time comparison.
    """
    computed_hash = hash_otp(otp, salt, secret)
    return hmac.compare_digest(computed_hash, stored_hash)
