"""Request-scoped identity.

The Flask session is read exactly once per request into a RequestContext;
everything below the controllers receives that object explicitly.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from flask import g, session

from ..core.enums import AccessMode, Role

SESSION_KEYS = ("mode", "user_id", "full_name", "role", "team_id", "selected_team_id", "pc_name")


@dataclass(frozen=True)
class RequestContext:
    mode: AccessMode = AccessMode.ANONYMOUS
    user_id: Optional[int] = None
    full_name: Optional[str] = None
    role: Optional[Role] = None
    team_id: Optional[int] = None
    selected_team_id: Optional[int] = None
    pc_name: Optional[str] = None

    @property
    def is_anonymous(self) -> bool:
        return self.mode == AccessMode.ANONYMOUS

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "user_id": self.user_id,
            "full_name": self.full_name,
            "role": self.role.value if self.role else None,
            "team_id": self.team_id,
            "selected_team_id": self.selected_team_id,
            "pc_name": self.pc_name,
        }


ANONYMOUS = RequestContext()


def _int_or_none(value: Any) -> Optional[int]:
    try:
        return int(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


def context_from_session(data: Mapping[str, Any]) -> RequestContext:
    """Build the context from session data. Unknown or inconsistent data means anonymous."""
    try:
        mode = AccessMode(data.get("mode") or AccessMode.ANONYMOUS.value)
    except ValueError:
        return ANONYMOUS

    if mode == AccessMode.USER:
        user_id = _int_or_none(data.get("user_id"))
        try:
            role = Role(data.get("role"))
        except ValueError:
            return ANONYMOUS
        if user_id is None:
            return ANONYMOUS
        return RequestContext(
            mode=mode,
            user_id=user_id,
            full_name=data.get("full_name"),
            role=role,
            team_id=_int_or_none(data.get("team_id")),
            selected_team_id=_int_or_none(data.get("selected_team_id")),
        )

    if mode == AccessMode.MANAGER:
        return RequestContext(mode=mode, selected_team_id=_int_or_none(data.get("selected_team_id")))

    if mode == AccessMode.PC:
        pc_name = (data.get("pc_name") or "").strip()
        if not pc_name:
            return ANONYMOUS
        return RequestContext(mode=mode, pc_name=pc_name, selected_team_id=_int_or_none(data.get("selected_team_id")))

    return ANONYMOUS


def current_context() -> RequestContext:
    """The context for the active request (memoized on flask.g)."""
    ctx = g.get("request_context")
    if ctx is None:
        ctx = context_from_session(session)
        g.request_context = ctx
    return ctx


def store_context(ctx: RequestContext, *, permanent: bool = True) -> None:
    session.clear()
    session.permanent = permanent
    for key, value in ctx.to_dict().items():
        if value is not None:
            session[key] = value
    g.request_context = ctx
    g.pop("capabilities", None)


def clear_context() -> None:
    session.clear()
    g.request_context = ANONYMOUS
    g.pop("capabilities", None)
