from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class UserProfile:
    """Account row (user_profiles). Plain data, no DB access."""

    user_id: int
    full_name: str
    username: str
    password_hash: str
    role: Role
    team_id: Optional[int]
    is_active: bool = True


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    full_name: str
    role: Role
    team_id: Optional[int]
