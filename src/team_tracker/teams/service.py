from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..auth.policy import Capabilities
from ..core.enums import Capability
from ..core.exceptions import UpstreamError, ValidationError
from .model import ProjectCoordinator, Team, TeamMember
from .repository import PCRepository, TeamRepository

logger = logging.getLogger(__name__)


class TeamService:
    def __init__(self, teams: TeamRepository, pcs: PCRepository):
        self._teams = teams
        self._pcs = pcs

    def list_pcs(self, caps: Capabilities) -> Sequence[ProjectCoordinator]:
        caps.require(Capability.READ_TASKS)
        return self._pcs.list_all()

    def list_teams(self, caps: Capabilities) -> Sequence[Team]:
        caps.require(Capability.READ_TASKS)
        teams = self._teams.list_teams()
        if caps.has(Capability.ANY_TEAM):
            return teams
        return [t for t in teams if t.team_id == caps.context.team_id]

    def list_members(self, caps: Capabilities, *, team_id: Optional[int] = None) -> Sequence[TeamMember]:
        scope = caps.team_scope(team_id)
        return self._teams.list_members(team_id=scope)

    def reorder_members(self, caps: Capabilities, members: Any) -> int:
        """Apply [{id, display_order}, ...]. Returns the number of rows updated."""
        caps.require(Capability.MANAGE_TEAM)

        if not isinstance(members, list):
            raise ValidationError("Invalid members data")

        pairs: list[tuple[int, int]] = []
        for m in members:
            try:
                pairs.append((int(m["id"]), int(m["display_order"])))
            except (TypeError, KeyError, ValueError):
                raise ValidationError("Invalid members data")

        failed: list[int] = []
        for member_id, order in pairs:
            try:
                if not self._teams.update_member_order(member_id=member_id, display_order=order):
                    failed.append(member_id)
            except Exception:
                logger.exception("Reorder failed for team member %s", member_id)
                failed.append(member_id)

        if failed:
            raise UpstreamError(f"Some updates failed: {', '.join(str(i) for i in failed)}")
        return len(pairs)
