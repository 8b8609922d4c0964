"""
Auth Routes
===========
HTTP surface for registration, login and OTP password recovery.
"""

from fastapi import APIRouter, Depends, status

from .dependencies import AuthContainer, get_container
from .schemas import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    SendOtpRequest,
    SendOtpResponse,
    SuccessResponse,
    VerifyOtpRequest,
)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, container: AuthContainer = Depends(get_container)):
    result = await container.auth_service.register(
        email=body.email,
        password=body.password,
        phone=body.phone,
        name=body.name or "",
    )
    return AuthResponse(message="User registered successfully", token=result.token, user=result.user)


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, container: AuthContainer = Depends(get_container)):
    result = await container.auth_service.login(body.email, body.password)
    return AuthResponse(message="Login successful", token=result.token, user=result.user)


@router.post("/send-otp", response_model=SendOtpResponse)
async def send_otp(body: SendOtpRequest, container: AuthContainer = Depends(get_container)):
    """Send a password-recovery code. The code itself is never in the response."""
    issued = await container.otp_manager.request_otp(body.phone)
    return SendOtpResponse(provider=issued.channel, expires_in=issued.expires_in)


@router.post("/verify-otp", response_model=SuccessResponse)
async def verify_otp(body: VerifyOtpRequest, container: AuthContainer = Depends(get_container)):
    await container.otp_manager.verify_otp(body.phone, body.otp)
    return SuccessResponse(message="OTP verified successfully")


@router.post("/reset-password", response_model=SuccessResponse)
async def reset_password(body: ResetPasswordRequest, container: AuthContainer = Depends(get_container)):
    await container.reset_service.reset_password(body.phone, body.new_password)
    return SuccessResponse(message="Password reset successfully")
