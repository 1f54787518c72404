from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Team:
    team_id: int
    name: str


@dataclass(frozen=True)
class TeamMember:
    member_id: int
    team_id: Optional[int]
    name: str
    hubstaff_name: Optional[str] = None
    department: Optional[str] = None
    display_order: int = 0


@dataclass(frozen=True)
class ProjectCoordinator:
    """A PC is a notification recipient, not a user account."""

    pc_id: int
    name: str
    email: Optional[str] = None
