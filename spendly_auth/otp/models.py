"""
OTP Models
==========
Policy, state record and result types for the OTP lifecycle.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional


@dataclass
class OTPConfig:
    """OTP policy."""
    length: int = 6
    expiry_seconds: int = 300  # 5 minutes
    max_attempts: int = 3
    cooldown_seconds: int = 60  # Min time between OTPs for one phone
    consumption_window_seconds: int = 600  # Verified OTP may gate a reset for 10 minutes

    @property
    def record_ttl_seconds(self) -> int:
        """Longest time a record can still be useful."""
        return self.expiry_seconds + self.consumption_window_seconds


@dataclass
class OtpRecord:
    """
    Live OTP state for one phone number.

    ``hashed_code`` is the only trace of the code kept after it is sent.
    """
    phone: str
    hashed_code: str
    salt: str
    owner_id: Any
    created_at: Optional[datetime]
    expires_at: datetime
    sent_at: Optional[datetime] = None
    attempts: int = 0
    verified: bool = False
    verified_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def attempts_remaining(self, max_attempts: int) -> int:
        return max(max_attempts - self.attempts, 0)

    def cooldown_anchor(self) -> Optional[datetime]:
        """Timestamp the issuance cooldown is measured from."""
        return self.sent_at or self.created_at

    def mark_verified(self, now: datetime) -> None:
        # verified is monotonic; keep the first verification time
        if not self.verified:
            self.verified = True
            self.verified_at = now

    def consumption_expired(self, now: datetime, window_seconds: int) -> bool:
        if self.verified_at is None:
            return False
        return now - self.verified_at > timedelta(seconds=window_seconds)

    def is_stale(self, now: datetime, config: OTPConfig) -> bool:
        """True once the record can no longer verify or gate a reset."""
        if self.verified:
            return self.consumption_expired(now, config.consumption_window_seconds)
        return self.is_expired(now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phone": self.phone,
            "hashed_code": self.hashed_code,
            "salt": self.salt,
            "owner_id": self.owner_id,
            "created_at": _iso(self.created_at),
            "expires_at": _iso(self.expires_at),
            "sent_at": _iso(self.sent_at),
            "attempts": self.attempts,
            "verified": self.verified,
            "verified_at": _iso(self.verified_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OtpRecord":
        return cls(
            phone=data["phone"],
            hashed_code=data["hashed_code"],
            salt=data.get("salt", ""),
            owner_id=data.get("owner_id"),
            created_at=_parse(data.get("created_at")),
            expires_at=_parse(data["expires_at"]),
            sent_at=_parse(data.get("sent_at")),
            attempts=int(data.get("attempts", 0)),
            verified=bool(data.get("verified", False)),
            verified_at=_parse(data.get("verified_at")),
        )


@dataclass
class OtpIssued:
    """Result of a successful issuance. Never carries the code."""
    channel: str
    expires_in: int


@dataclass
class OtpVerified:
    owner_id: Any
    verified_at: datetime


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None
