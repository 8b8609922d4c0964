"""
Auth Errors
===========
Error taxonomy for the OTP and credential flows.

Every error carries a stable machine code, a human-readable message that is
safe to show to the user, and the HTTP status the request boundary maps it to.
"""

from typing import Any, Dict, Optional


class AuthError(Exception):
    """Base class for all recoverable auth errors."""

    code: str = "AUTH_ERROR"
    status_code: int = 400
    default_message: str = "Request could not be processed"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message or self.default_message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        super().__init__(f"[{self.code}] {self.message}")

    def extra(self) -> Dict[str, Any]:
        """Error-specific fields added to the response body."""
        return {}

    def to_dict(self) -> Dict[str, Any]:
        body = {
            "success": False,
            "error": self.message,
            "code": self.code,
        }
        body.update(self.extra())
        return body


class ValidationError(AuthError):
    """Malformed input: phone format, code format, password length."""
    code = "VALIDATION_ERROR"
    status_code = 400
    default_message = "Invalid request"


class NotFoundError(AuthError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Not found"


class UserNotFoundError(NotFoundError):
    """No user owns the phone, or the user vanished before a reset."""
    code = "USER_NOT_FOUND"
    status_code = 404
    default_message = "User not found"


class OtpNotFoundError(NotFoundError):
    """No live OTP record for the phone."""
    code = "OTP_NOT_FOUND"
    status_code = 400
    default_message = "OTP not found or expired. Please request a new OTP."


class RateLimitError(AuthError):
    code = "OTP_COOLDOWN"
    status_code = 429
    default_message = "Please wait 1 minute before requesting another OTP"

    def __init__(self, message: Optional[str] = None, retry_after: int = 0):
        self.retry_after = max(int(retry_after), 0)
        super().__init__(message)

    def extra(self) -> Dict[str, Any]:
        return {"retry_after": self.retry_after}


class ExpiredError(AuthError):
    code = "OTP_EXPIRED"
    status_code = 400
    default_message = "OTP has expired. Please request a new OTP."


class AttemptsExceededError(AuthError):
    code = "OTP_ATTEMPTS_EXCEEDED"
    status_code = 400
    default_message = "Too many failed attempts. Please request a new OTP."


class InvalidCodeError(AuthError):
    code = "OTP_INVALID"
    status_code = 400

    def __init__(self, attempts_remaining: int):
        self.attempts_remaining = attempts_remaining
        super().__init__(f"Invalid OTP. {attempts_remaining} attempt(s) remaining.")

    def extra(self) -> Dict[str, Any]:
        return {"attempts_remaining": self.attempts_remaining}


class UnauthorizedError(AuthError):
    """Reset attempted without a verified OTP."""
    code = "OTP_NOT_VERIFIED"
    status_code = 400
    default_message = "OTP verification required. Please verify OTP first."


class DeliveryError(AuthError):
    code = "OTP_DELIVERY_FAILED"
    status_code = 500
    default_message = "Unable to send OTP. Please check your phone number and try again later."

    def __init__(self, message: Optional[str] = None, provider: Optional[str] = None):
        self.provider = provider
        super().__init__(message)


class ConflictError(AuthError):
    code = "USER_EXISTS"
    status_code = 409
    default_message = "User with this email or phone number already exists"


class CredentialError(AuthError):
    code = "INVALID_CREDENTIALS"
    status_code = 401
    default_message = "Email or password is incorrect"


class StoreError(AuthError):
    """Storage backend failure. The message never carries backend details."""
    code = "STORE_ERROR"
    status_code = 500
    default_message = "Unable to process request. Please try again later."
