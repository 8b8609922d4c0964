"""
Services
========
Credential flows and the password-reset completion step.
"""

from .auth_service import AuthService, AuthResult
from .password_reset import PasswordResetService

__all__ = [
    "AuthService",
    "AuthResult",
    "PasswordResetService",
]
