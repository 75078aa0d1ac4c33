"""Shared pytest fixtures.

Rate limiting is switched off and the session store is moved to a temporary
directory before the application module is imported.
"""

import os
import tempfile

os.environ["RATELIMIT_ENABLED"] = "false"
os.environ.setdefault("SESSION_FILE_DIR", tempfile.mkdtemp(prefix="kopuro-session-"))

from unittest.mock import MagicMock

import pytest

from config import Config


def make_user(role="worker", is_active=True, is_confirmed_by_admin=True, **extra):
    data = {
        "id": extra.pop("id", 7),
        "email": extra.pop("email", "worker@example.com"),
        "full_name": extra.pop("full_name", "Асан Асанов"),
        "is_active": is_active,
        "is_confirmed_by_admin": is_confirmed_by_admin,
        "role": role,
    }
    data.update(extra)
    return data


@pytest.fixture
def storage():
    """Dict standing in for the browser session store."""
    return {}


@pytest.fixture
def client_mock():
    """BackendClient double with no canned responses."""
    return MagicMock()


BACKEND_METHODS = (
    "login_for_token", "register", "get_current_user", "list_users",
    "list_unconfirmed_workers", "confirm_worker", "submit_issue",
    "list_issues", "submit_feedback", "get_overall_stats",
    "get_timeline_stats", "get_top_addresses",
)


@pytest.fixture
def backend(monkeypatch):
    """Replace every call of the shared backend client with a MagicMock."""
    from services.backend_client import backend_client

    fake = MagicMock()
    for name in BACKEND_METHODS:
        monkeypatch.setattr(backend_client, name, getattr(fake, name))
    return fake


@pytest.fixture
def flask_app(backend):
    import app as app_module

    app_module.app.config.update(TESTING=True)
    return app_module.app


@pytest.fixture
def web(flask_app):
    return flask_app.test_client()


def login_as(web, token="tok-1"):
    with web.session_transaction() as sess:
        sess[Config.AUTH_TOKEN_KEY] = token
