"""
Session Tokens
==============
Signed JWT issuance for register and login responses.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt


class TokenIssuer:
    """Signs and decodes HS256 session tokens."""

    def __init__(self, secret: str, ttl_seconds: int = 7 * 24 * 60 * 60, algorithm: str = "HS256"):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self.secret = secret
        self.ttl_seconds = ttl_seconds
        self.algorithm = algorithm

    def sign(self, claims: Dict[str, Any], ttl_seconds: Optional[int] = None) -> str:
        now = datetime.now(timezone.utc)
        payload = dict(claims)
        payload["iat"] = now
        payload["exp"] = now + timedelta(seconds=ttl_seconds or self.ttl_seconds)
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> Dict[str, Any]:
        """Decode and verify a token. Raises ``jwt.InvalidTokenError`` on failure."""
        return jwt.decode(token, self.secret, algorithms=[self.algorithm])
