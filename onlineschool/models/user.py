"""
Authenticated user model.
"""

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional


UserRole = Literal["student", "teacher", "admin"]


@dataclass
class User:
    """Current user as returned by ``GET /api/me/``."""

    id: int
    username: str
    email: str
    role: UserRole
    full_name: Optional[str] = None
    profile_picture_url: Optional[str] = None
    timezone: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.full_name or self.username

    @property
    def is_teacher(self) -> bool:
        return self.role == "teacher"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'User':
        return cls(
            id=int(d["id"]),
            username=d.get("username", ""),
            email=d.get("email", ""),
            role=d.get("role", "student"),
            full_name=d.get("full_name"),
            profile_picture_url=d.get("profile_picture_url"),
            timezone=d.get("timezone"),
        )
