from __future__ import annotations

import pytest

from team_tracker.auth.service import AuthService
from team_tracker.core.enums import AccessMode, Role
from team_tracker.core.exceptions import AuthenticationError, NotFoundError, ValidationError


@pytest.fixture
def service(fakes):
    return AuthService(fakes.users, fakes.pcs, manager_passkey="manager-pass", pc_passkey="pc-pass")


def test_authenticate_success(service):
    user = service.authenticate("asha", "asha-pass")
    assert user.user_id == 2
    assert user.role == Role.MEMBER

    ctx = service.user_context(user)
    assert ctx.mode == AccessMode.USER
    assert ctx.team_id == 1


@pytest.mark.parametrize(
    "username, password",
    [("asha", "wrong"), ("nobody", "x"), ("", "asha-pass"), ("old", "old-pass")],
)
def test_authenticate_failures(service, username, password):
    with pytest.raises(AuthenticationError):
        service.authenticate(username, password)


def test_manager_mode(service):
    ctx = service.enter_manager_mode("manager-pass", team_id=2)
    assert ctx.mode == AccessMode.MANAGER
    assert ctx.selected_team_id == 2
    with pytest.raises(AuthenticationError):
        service.enter_manager_mode("pc-pass")


def test_pc_mode_resolves_canonical_name(service):
    ctx = service.enter_pc_mode("pc-pass", "milda")
    assert ctx.mode == AccessMode.PC
    assert ctx.pc_name == "Milda"


def test_pc_mode_errors(service):
    with pytest.raises(AuthenticationError):
        service.enter_pc_mode("manager-pass", "Milda")
    with pytest.raises(NotFoundError):
        service.enter_pc_mode("pc-pass", "Nobody")


def test_disabled_passkeys_reject_everything(fakes):
    service = AuthService(fakes.users, fakes.pcs)
    with pytest.raises(AuthenticationError):
        service.enter_manager_mode("")
    with pytest.raises(AuthenticationError):
        service.enter_pc_mode("", "Milda")


def test_numeric_passkey_is_compared_as_text(fakes):
    service = AuthService(fakes.users, fakes.pcs, manager_passkey="1234", pc_passkey="pc-pass")
    assert service.enter_manager_mode(1234).mode == AccessMode.MANAGER
    with pytest.raises(AuthenticationError):
        service.enter_manager_mode(4321)
    with pytest.raises(AuthenticationError):
        service.enter_pc_mode(1234, "Milda")


def test_numeric_username_is_just_a_failed_login(service):
    with pytest.raises(AuthenticationError):
        service.authenticate(42, 1234)


@pytest.mark.parametrize("passkey", [["manager-pass"], {"key": "manager-pass"}, 12.5])
def test_structured_passkeys_are_rejected(service, passkey):
    with pytest.raises(ValidationError):
        service.enter_manager_mode(passkey)
