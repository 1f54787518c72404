from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ProjectCoordinator, Team, TeamMember


class TeamRepository(Protocol):
    def list_teams(self) -> Sequence[Team]:
        raise NotImplementedError

    def list_members(self, *, team_id: Optional[int] = None) -> Sequence[TeamMember]:
        """Members ordered by display_order, then name. None = every team."""

        raise NotImplementedError

    def update_member_order(self, *, member_id: int, display_order: int) -> bool:
        raise NotImplementedError


class PCRepository(Protocol):
    def list_all(self) -> Sequence[ProjectCoordinator]:
        raise NotImplementedError

    def find_by_name(self, name: str) -> Optional[ProjectCoordinator]:
        """Case-insensitive lookup."""

        raise NotImplementedError
