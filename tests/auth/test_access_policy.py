from __future__ import annotations

from types import SimpleNamespace

import pytest

from team_tracker.auth.context import ANONYMOUS, context_from_session
from team_tracker.core.enums import AccessMode, Capability, Role
from team_tracker.core.exceptions import AuthenticationError, AuthorizationError, ValidationError


def _task(team_id):
    return SimpleNamespace(team_id=team_id)


def test_anonymous_has_nothing(caps):
    anon = caps(AccessMode.ANONYMOUS)
    assert anon.granted == frozenset()
    with pytest.raises(AuthenticationError):
        anon.require(Capability.READ_TASKS)


def test_member_is_scoped_to_own_team(caps):
    member = caps(AccessMode.USER, Role.MEMBER, team_id=1)
    assert member.can_edit_task(_task(1))
    assert not member.can_edit_task(_task(2))
    assert member.can_delete_task(_task(1))
    assert not member.can_delete_task(_task(2))
    assert member.team_scope(None) == 1
    with pytest.raises(AuthorizationError):
        member.team_scope(2)
    assert member.team_for_create(2) == 1


def test_member_without_team_cannot_create(caps):
    member = caps(AccessMode.USER, Role.MEMBER)
    with pytest.raises(ValidationError, match="Team ID is required"):
        member.team_for_create(None)


@pytest.mark.parametrize("role", [Role.MANAGER, Role.SUPER_ADMIN])
def test_elevated_roles_reach_any_team(caps, role):
    user = caps(AccessMode.USER, role, team_id=1)
    assert user.can_edit_task(_task(2))
    assert user.can_delete_task(_task(2))
    assert user.has(Capability.READ_ALL_NOTIFICATIONS)
    assert user.team_for_create(2) == 2
    assert user.team_scope(None) is None


def test_manager_mode_has_everything_but_needs_a_team_for_listings(caps):
    manager = caps(AccessMode.MANAGER)
    assert manager.granted == frozenset(Capability)
    with pytest.raises(ValidationError):
        manager.team_scope(None)
    assert manager.team_scope(3) == 3
    assert caps(AccessMode.MANAGER, selected_team_id=4).team_scope(None) == 4


def test_pc_mode_is_read_only(caps):
    pc = caps(AccessMode.PC, pc_name="Milda")
    assert pc.can_read_task(_task(2))
    assert not pc.can_edit_task(_task(2))
    with pytest.raises(AuthorizationError):
        pc.require(Capability.WRITE_TASKS)
    assert pc.notification_scope("milda") == "Milda"


def test_context_from_session_rejects_inconsistent_data():
    assert context_from_session({}) is ANONYMOUS
    assert context_from_session({"mode": "bogus"}) is ANONYMOUS
    assert context_from_session({"mode": "user", "role": "member"}) is ANONYMOUS
    assert context_from_session({"mode": "pc", "pc_name": "  "}) is ANONYMOUS

    ctx = context_from_session({"mode": "user", "user_id": "2", "role": "member", "team_id": "1"})
    assert ctx.mode == AccessMode.USER
    assert ctx.user_id == 2
    assert ctx.team_id == 1
