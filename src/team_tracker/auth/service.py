from __future__ import annotations

import hmac
import logging
from typing import Any, Optional

from werkzeug.security import check_password_hash

from ..common.validators import require_non_empty
from ..core.enums import AccessMode
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from ..teams.repository import PCRepository
from .context import RequestContext
from .model import SessionUser
from .repository import UserRepository

logger = logging.getLogger(__name__)


def _as_text(value: Any) -> str:
    """Credentials arrive as JSON; a numeric PIN is compared as its text."""
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, (str, int)):
        return str(value)
    raise ValidationError("Credentials must be text")


def _passkey_matches(expected: str, given: Any) -> bool:
    given = _as_text(given)
    if not expected or not given:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), given.encode("utf-8"))


class AuthService:
    """Use cases: login, manager (guest) mode and PC mode."""

    def __init__(self, users: UserRepository, pcs: PCRepository, *, manager_passkey: str = "", pc_passkey: str = ""):
        self._users = users
        self._pcs = pcs
        self._manager_passkey = manager_passkey or ""
        self._pc_passkey = pc_passkey or ""

    def authenticate(self, username: str, password: str) -> SessionUser:
        username = _as_text(username).strip()
        user = self._users.get_by_username(username) if username else None
        if not user or not user.is_active:
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(user.password_hash, _as_text(password))
        except Exception:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid username or password")

        return SessionUser(user_id=user.user_id, full_name=user.full_name, role=user.role, team_id=user.team_id)

    def user_context(self, user: SessionUser) -> RequestContext:
        return RequestContext(
            mode=AccessMode.USER,
            user_id=user.user_id,
            full_name=user.full_name,
            role=user.role,
            team_id=user.team_id,
        )

    def enter_manager_mode(self, passkey: str, *, team_id: Optional[int] = None) -> RequestContext:
        if not self._manager_passkey:
            raise AuthenticationError("Manager mode is disabled")
        if not _passkey_matches(self._manager_passkey, passkey):
            logger.warning("Rejected manager-mode passkey")
            raise AuthenticationError("Invalid passkey")
        return RequestContext(mode=AccessMode.MANAGER, selected_team_id=team_id)

    def enter_pc_mode(self, passkey: str, pc_name: str) -> RequestContext:
        if not self._pc_passkey:
            raise AuthenticationError("PC mode is disabled")
        if not _passkey_matches(self._pc_passkey, passkey):
            logger.warning("Rejected PC-mode passkey")
            raise AuthenticationError("Invalid passkey")

        pc_name = require_non_empty(pc_name, "pc_name")
        pc = self._pcs.find_by_name(pc_name)
        if not pc:
            raise NotFoundError(f"Unknown PC: {pc_name}")
        return RequestContext(mode=AccessMode.PC, pc_name=pc.name)
