"""
User Models
===========
Plain user record passed between stores and services.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


@dataclass
class UserRecord:
    id: int
    email: str
    password_hash: str
    phone: str
    name: str = ""
    salary: Optional[float] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def public_dict(self, include_salary: bool = False) -> Dict[str, Any]:
        """User fields safe to return to clients."""
        data: Dict[str, Any] = {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "phone": self.phone,
        }
        if include_salary:
            data["salary"] = self.salary
        return data
