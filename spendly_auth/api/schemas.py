"""
API Schemas
===========
Request and response bodies for the /auth endpoints.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    phone: str
    name: Optional[str] = ""


class LoginRequest(BaseModel):
    email: str
    password: str


class SendOtpRequest(BaseModel):
    phone: str


class VerifyOtpRequest(BaseModel):
    phone: str
    otp: str


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    phone: str
    new_password: str = Field(alias="newPassword")


class AuthResponse(BaseModel):
    message: str
    token: str
    user: Dict[str, Any]


class SendOtpResponse(BaseModel):
    success: bool = True
    message: str = "OTP sent successfully to your mobile number"
    provider: str
    expires_in: Optional[int] = None


class SuccessResponse(BaseModel):
    success: bool = True
    message: str
