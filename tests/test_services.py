"""
Tests for Auth Services
=======================
Registration, login and password reset completion.
"""

import bcrypt
import pytest

from spendly_auth.exceptions import (
    ConflictError,
    CredentialError,
    ExpiredError,
    UnauthorizedError,
    UserNotFoundError,
    ValidationError,
)
from spendly_auth.services import AuthService, PasswordResetService
from spendly_auth.tokens import TokenIssuer

from conftest import EMAIL, PASSWORD, PHONE


@pytest.fixture
def tokens():
    return TokenIssuer("test-jwt-secret")


@pytest.fixture
def auth_service(user_store, hasher, tokens):
    return AuthService(user_store, hasher, tokens)


@pytest.fixture
def reset_service(manager, user_store, hasher):
    return PasswordResetService(manager, user_store, hasher)


async def verified(manager, sms_provider, phone=PHONE):
    await manager.request_otp(phone)
    await manager.verify_otp(phone, sms_provider.last_code())


class TestRegister:

    @pytest.mark.asyncio
    async def test_register(self, auth_service, user_store, tokens):
        """Should create the user and return a signed token."""
        result = await auth_service.register("ravi@example.com", "hunter22", "9123456789", "Ravi")

        assert result.user == {
            "id": 2,
            "email": "ravi@example.com",
            "name": "Ravi",
            "phone": "9123456789",
        }
        claims = tokens.decode(result.token)
        assert claims["userId"] == 2
        assert claims["email"] == "ravi@example.com"

        stored = await user_store.find_by_phone("9123456789")
        assert stored.password_hash.startswith("$argon2id$")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email,password,phone,code", [
        ("", "hunter22", "9123456789", "FIELDS_REQUIRED"),
        ("ravi@example.com", "", "9123456789", "FIELDS_REQUIRED"),
        ("ravi@example.com", "hunter22", "", "PHONE_REQUIRED"),
        ("ravi@example.com", "hunter22", "1234567890", "INVALID_PHONE"),
        ("ravi@example.com", "abc", "9123456789", "PASSWORD_TOO_SHORT"),
    ])
    async def test_validation(self, auth_service, email, password, phone, code):
        with pytest.raises(ValidationError) as exc_info:
            await auth_service.register(email, password, phone)

        assert exc_info.value.code == code

    @pytest.mark.asyncio
    async def test_duplicate_phone_or_email(self, auth_service):
        """Should refuse a phone or email that is already registered."""
        with pytest.raises(ConflictError):
            await auth_service.register("other@example.com", "hunter22", PHONE)
        with pytest.raises(ConflictError) as exc_info:
            await auth_service.register(EMAIL, "hunter22", "9123456789")

        assert exc_info.value.status_code == 409


class TestLogin:

    @pytest.mark.asyncio
    async def test_login(self, auth_service, tokens):
        result = await auth_service.login(EMAIL, PASSWORD)

        assert result.user["email"] == EMAIL
        assert "salary" in result.user
        assert tokens.decode(result.token)["userId"] == 1

    @pytest.mark.asyncio
    async def test_wrong_password(self, auth_service):
        with pytest.raises(CredentialError) as exc_info:
            await auth_service.login(EMAIL, "wrong-password")

        assert exc_info.value.status_code == 401
        assert exc_info.value.code == "INVALID_CREDENTIALS"

    @pytest.mark.asyncio
    async def test_unknown_email(self, auth_service):
        """Unknown email looks the same as a wrong password."""
        with pytest.raises(CredentialError):
            await auth_service.login("nobody@example.com", PASSWORD)

    @pytest.mark.asyncio
    async def test_missing_fields(self, auth_service):
        with pytest.raises(ValidationError) as exc_info:
            await auth_service.login(EMAIL, "")

        assert exc_info.value.code == "CREDENTIALS_REQUIRED"

    @pytest.mark.asyncio
    async def test_upgrades_bcrypt_hash(self, auth_service, user_store):
        """A legacy bcrypt hash is accepted and replaced with Argon2id."""
        legacy = bcrypt.hashpw(b"legacy-pass", bcrypt.gensalt(rounds=4)).decode()
        await user_store.insert_user("old@example.com", legacy, "Old", "9000000001")

        await auth_service.login("old@example.com", "legacy-pass")

        stored = await user_store.find_by_email("old@example.com")
        assert stored.password_hash.startswith("$argon2id$")
        await auth_service.login("old@example.com", "legacy-pass")


class TestPasswordReset:

    @pytest.mark.asyncio
    async def test_reset_flow(self, reset_service, auth_service, manager, sms_provider, otp_store):
        """Request, verify and reset: the new password works and the OTP is spent."""
        await verified(manager, sms_provider)

        await reset_service.reset_password(PHONE, "brand-new-pass")

        assert await otp_store.get(PHONE) is None
        result = await auth_service.login(EMAIL, "brand-new-pass")
        assert result.user["phone"] == PHONE
        with pytest.raises(CredentialError):
            await auth_service.login(EMAIL, PASSWORD)

    @pytest.mark.asyncio
    async def test_second_reset_needs_new_otp(self, reset_service, manager, sms_provider):
        await verified(manager, sms_provider)
        await reset_service.reset_password(PHONE, "brand-new-pass")

        with pytest.raises(UnauthorizedError):
            await reset_service.reset_password(PHONE, "another-pass")

    @pytest.mark.asyncio
    async def test_requires_verification(self, reset_service, manager):
        await manager.request_otp(PHONE)

        with pytest.raises(UnauthorizedError):
            await reset_service.reset_password(PHONE, "brand-new-pass")

    @pytest.mark.asyncio
    async def test_window_lapsed(self, reset_service, manager, sms_provider, clock):
        await verified(manager, sms_provider)
        clock.advance(601)

        with pytest.raises(ExpiredError) as exc_info:
            await reset_service.reset_password(PHONE, "brand-new-pass")

        assert exc_info.value.code == "OTP_VERIFICATION_EXPIRED"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("phone,password,code", [
        ("", "brand-new-pass", "RESET_FIELDS_REQUIRED"),
        (PHONE, "", "RESET_FIELDS_REQUIRED"),
        (PHONE, "short", "PASSWORD_TOO_SHORT"),
        (PHONE, "1234567", "PASSWORD_TOO_SHORT"),
    ])
    async def test_validation_keeps_otp(self, reset_service, manager, sms_provider, otp_store, phone, password, code):
        """Input errors are reported before the verified OTP is touched."""
        await verified(manager, sms_provider)

        with pytest.raises(ValidationError) as exc_info:
            await reset_service.reset_password(phone, password)

        assert exc_info.value.code == code
        assert (await otp_store.get(PHONE)).verified

    @pytest.mark.asyncio
    async def test_user_deleted_after_verification(self, reset_service, manager, sms_provider, user_store, otp_store):
        """A user removed mid-flow gets USER_NOT_FOUND and the OTP is kept."""
        await verified(manager, sms_provider)
        await user_store.delete_by_phone(PHONE)

        with pytest.raises(UserNotFoundError) as exc_info:
            await reset_service.reset_password(PHONE, "brand-new-pass")

        assert exc_info.value.status_code == 404
        assert await otp_store.get(PHONE) is not None


class TestRecoveryScenarios:
    """Whole recovery journeys at the service level."""

    @pytest.mark.asyncio
    async def test_two_wrong_codes_then_reset(self, manager, reset_service, sms_provider, otp_store):
        """Two misses, a hit, a reset, and the record is gone."""
        from spendly_auth.exceptions import InvalidCodeError

        from conftest import wrong_code

        await manager.request_otp(PHONE)
        code = sms_provider.last_code()

        remaining = []
        for _ in range(2):
            with pytest.raises(InvalidCodeError) as exc_info:
                await manager.verify_otp(PHONE, wrong_code(code))
            remaining.append(exc_info.value.attempts_remaining)
        assert remaining == [2, 1]

        await manager.verify_otp(PHONE, code)
        await reset_service.reset_password(PHONE, "newpass123")

        assert await otp_store.get(PHONE) is None
        with pytest.raises(UnauthorizedError):
            await reset_service.reset_password(PHONE, "newpass456")

    @pytest.mark.asyncio
    async def test_late_code_then_not_found(self, manager, sms_provider, clock):
        """A correct code after expiry fails, and the next try finds nothing."""
        from spendly_auth.exceptions import OtpNotFoundError

        await manager.request_otp(PHONE)
        code = sms_provider.last_code()
        clock.advance(6 * 60)

        with pytest.raises(ExpiredError):
            await manager.verify_otp(PHONE, code)
        with pytest.raises(OtpNotFoundError):
            await manager.verify_otp(PHONE, code)
