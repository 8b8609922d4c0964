"""
Password Hashing
================
Argon2id hashing with transparent upgrade of legacy bcrypt hashes.
"""

from .hasher import PasswordHasher, BCRYPT_PREFIXES

__all__ = [
    "PasswordHasher",
    "BCRYPT_PREFIXES",
]
