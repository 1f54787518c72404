"""Authorization policy.

`AccessPolicy.evaluate` runs once per request and yields a `Capabilities`
object; services ask it questions instead of checking roles or modes.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, FrozenSet, Optional

from flask import g

from ..core.enums import AccessMode, Capability, Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from .context import RequestContext, current_context

_MEMBER = frozenset({Capability.READ_TASKS, Capability.WRITE_TASKS, Capability.VIEW_ACTIVITY})

_ELEVATED = _MEMBER | {
    Capability.ANY_TEAM,
    Capability.DELETE_TASKS,
    Capability.MANAGE_TEAM,
    Capability.READ_NOTIFICATIONS,
    Capability.READ_ALL_NOTIFICATIONS,
}

_FULL = frozenset(Capability)

_PC = frozenset({Capability.READ_TASKS, Capability.ANY_TEAM, Capability.READ_NOTIFICATIONS})


@dataclass(frozen=True)
class Capabilities:
    context: RequestContext
    granted: FrozenSet[Capability]

    def has(self, cap: Capability) -> bool:
        return cap in self.granted

    def require(self, cap: Capability) -> None:
        if self.has(cap):
            return
        if self.context.is_anonymous:
            raise AuthenticationError("Unauthorized - please log in")
        raise AuthorizationError("You do not have permission for this action")

    def _owns(self, team_id: Optional[int]) -> bool:
        return team_id is not None and team_id == self.context.team_id

    def can_edit_task(self, task: Any) -> bool:
        if not self.has(Capability.WRITE_TASKS):
            return False
        return self.has(Capability.ANY_TEAM) or self._owns(getattr(task, "team_id", None))

    def can_delete_task(self, task: Any) -> bool:
        if not self.has(Capability.WRITE_TASKS):
            return False
        return self.has(Capability.DELETE_TASKS) or self._owns(getattr(task, "team_id", None))

    def can_read_task(self, task: Any) -> bool:
        if not self.has(Capability.READ_TASKS):
            return False
        return self.has(Capability.ANY_TEAM) or self._owns(getattr(task, "team_id", None))

    def team_for_create(self, requested: Optional[int]) -> int:
        """Team a new task lands in: the requested one when allowed, else the caller's own."""
        if self.has(Capability.ANY_TEAM) and requested:
            return int(requested)
        team_id = self.context.team_id
        if self.has(Capability.ANY_TEAM) and not team_id:
            team_id = self.context.selected_team_id
        if not team_id:
            raise ValidationError("Team ID is required")
        return int(team_id)

    def team_scope(self, requested: Optional[int]) -> Optional[int]:
        """Team filter for listings. None means every team."""
        self.require(Capability.READ_TASKS)
        if self.has(Capability.ANY_TEAM):
            team_id = requested or self.context.selected_team_id
            if team_id is None and self.context.mode == AccessMode.MANAGER:
                raise ValidationError("Select a team first (team_id is required in manager mode)")
            return team_id
        if self.context.team_id is None:
            raise AuthorizationError("Your account is not assigned to a team")
        if requested and int(requested) != self.context.team_id:
            raise AuthorizationError("You can only view your own team")
        return self.context.team_id

    def notification_scope(self, requested_pc: Optional[str]) -> str:
        """PC whose inbox the caller may read."""
        self.require(Capability.READ_NOTIFICATIONS)
        requested = (requested_pc or "").strip()
        if self.context.mode == AccessMode.PC:
            own = self.context.pc_name or ""
            if requested and requested.lower() != own.lower():
                raise AuthorizationError("PC mode can only read its own notifications")
            return own
        if not requested:
            raise ValidationError("pc_name is required")
        return requested


class AccessPolicy:
    def evaluate(self, ctx: RequestContext) -> Capabilities:
        return Capabilities(context=ctx, granted=self._granted(ctx))

    @staticmethod
    def _granted(ctx: RequestContext) -> FrozenSet[Capability]:
        if ctx.mode == AccessMode.MANAGER:
            return _FULL
        if ctx.mode == AccessMode.PC:
            return _PC
        if ctx.mode == AccessMode.USER:
            if ctx.role in {Role.SUPER_ADMIN, Role.MANAGER}:
                return frozenset(_ELEVATED)
            return _MEMBER
        return frozenset()


def current_capabilities(policy: AccessPolicy) -> Capabilities:
    """Capabilities of the active request, evaluated once and kept on flask.g."""
    caps = g.get("capabilities")
    if caps is None:
        caps = policy.evaluate(current_context())
        g.capabilities = caps
    return caps
