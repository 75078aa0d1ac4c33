"""Tests for check_access: one decision per (area, user, auth state)."""

from __future__ import annotations

import pytest

from conftest import make_user
from services.access import (
    AccessAction,
    AccessDecision,
    Area,
    MSG_ADMIN_LOGIN,
    MSG_ADMIN_ONLY,
    MSG_LOGIN_FOR_DASHBOARD,
    MSG_NOT_ACTIVE,
    check_access,
    home_for,
    with_message,
)
from services.auth_service import User


def _user(**kwargs):
    return User.from_dict(make_user(**kwargs))


@pytest.mark.parametrize("area", list(Area))
def test_loading_waits_everywhere(area):
    assert check_access(area, None, False, True) == AccessDecision(AccessAction.WAIT)


class TestDashboard:
    def test_anonymous_goes_to_login(self):
        decision = check_access(Area.DASHBOARD, None, False, False)
        assert decision == AccessDecision(
            AccessAction.REDIRECT, with_message("/login", MSG_LOGIN_FOR_DASHBOARD)
        )

    def test_user_without_authentication_goes_to_login(self):
        decision = check_access(Area.DASHBOARD, _user(), False, False)
        assert decision.action is AccessAction.REDIRECT

    def test_admin_is_sent_to_admin(self):
        decision = check_access(Area.DASHBOARD, _user(role="admin"), True, False)
        assert decision == AccessDecision(AccessAction.REDIRECT, "/admin")

    @pytest.mark.parametrize("flags", [{"is_active": False}, {"is_confirmed_by_admin": False}])
    def test_unconfirmed_or_inactive_worker_is_logged_out(self, flags):
        decision = check_access(Area.DASHBOARD, _user(**flags), True, False)
        assert decision == AccessDecision(AccessAction.LOGOUT, with_message("/login", MSG_NOT_ACTIVE))

    def test_active_worker_allowed(self):
        assert check_access(Area.DASHBOARD, _user(), True, False).allowed


class TestAdmin:
    def test_anonymous_goes_to_login(self):
        decision = check_access(Area.ADMIN, None, False, False)
        assert decision.location == with_message("/login", MSG_ADMIN_LOGIN)

    def test_worker_is_denied(self):
        decision = check_access(Area.ADMIN, _user(), True, False)
        assert decision == AccessDecision(AccessAction.REDIRECT, with_message("/dashboard", MSG_ADMIN_ONLY))

    def test_admin_allowed(self):
        assert check_access(Area.ADMIN, _user(role="admin"), True, False).allowed


class TestGuest:
    def test_anonymous_allowed(self):
        assert check_access(Area.GUEST, None, False, False).allowed

    def test_entitled_users_are_sent_home(self):
        assert check_access(Area.GUEST, _user(), True, False).location == "/dashboard"
        assert check_access(Area.GUEST, _user(role="admin"), True, False).location == "/admin"

    def test_unconfirmed_worker_stays(self):
        assert check_access(Area.GUEST, _user(is_confirmed_by_admin=False), True, False).allowed


def test_home_for():
    assert home_for(None) is None
    assert home_for(_user(role="admin")) == "/admin"
    assert home_for(_user()) == "/dashboard"
    assert home_for(_user(is_active=False)) is None
