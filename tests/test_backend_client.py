"""Tests for BackendClient: request shape and error conversion."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from services.backend_client import BackendClient
from services.errors import NETWORK_ERROR, BackendError


def _response(status=200, body=None, reason="OK"):
    resp = MagicMock()
    resp.ok = 200 <= status < 300
    resp.status_code = status
    resp.reason = reason
    resp.content = b"{}" if body is not None else b""
    if isinstance(body, Exception):
        resp.json.side_effect = body
    else:
        resp.json.return_value = body
    return resp


@pytest.fixture
def http(monkeypatch):
    fake = MagicMock()
    monkeypatch.setattr("services.backend_client.requests.request", fake)
    return fake


@pytest.fixture
def client():
    return BackendClient(base_url="http://backend.test/", timeout=3)


class TestRequests:
    def test_login_is_form_encoded(self, http, client):
        http.return_value = _response(body={"access_token": "abc", "token_type": "bearer"})

        assert client.login_for_token("a@b.kg", "secret") == "abc"

        method, url = http.call_args.args
        assert (method, url) == ("POST", "http://backend.test/auth/token")
        assert http.call_args.kwargs["data"] == {"username": "a@b.kg", "password": "secret"}
        assert "Authorization" not in http.call_args.kwargs["headers"]

    def test_bearer_token_is_per_call(self, http, client):
        http.return_value = _response(body={"id": 1})

        client.get_current_user("tok-1")
        first = http.call_args.kwargs["headers"]["Authorization"]
        client.submit_issue({"text": "x"})
        second = http.call_args.kwargs["headers"]

        assert first == "Bearer tok-1"
        assert "Authorization" not in second

    def test_paginated_admin_list(self, http, client):
        http.return_value = _response(body=[])

        client.list_unconfirmed_workers("tok", skip=10, limit=20)

        assert http.call_args.args[1] == "http://backend.test/admin/unconfirmed-workers"
        assert http.call_args.kwargs["params"] == {"skip": 10, "limit": 20}

    def test_confirm_worker_uses_patch(self, http, client):
        http.return_value = _response(body={"id": 5})
        client.confirm_worker("tok", 5)
        assert http.call_args.args == ("PATCH", "http://backend.test/admin/confirm-worker/5")

    def test_issue_lookup_params(self, http, client):
        http.return_value = _response(body=[])
        client.list_issues("@asan", limit=100)
        assert http.call_args.kwargs["params"] == {"source_user_id": "@asan", "limit": 100}

    def test_feedback_payload(self, http, client):
        http.return_value = _response(body={"ok": True})
        client.submit_feedback(3, "Спасибо")
        assert http.call_args.kwargs["json"] == {"user_feedback_on_resolution": "Спасибо"}

    def test_stats_endpoints(self, http, client):
        http.return_value = _response(body={})
        client.get_timeline_stats("tok")
        assert http.call_args.kwargs["params"] == {"group_by_period": "day"}
        client.get_top_addresses("tok", limit=7)
        assert http.call_args.args[1].endswith("/stats/top_problematic_addresses")
        assert http.call_args.kwargs["params"] == {"limit": 7}

    def test_empty_body_returns_none(self, http, client):
        http.return_value = _response(status=204)
        assert client.confirm_worker("tok", 1) is None


class TestErrors:
    def test_validation_detail_is_formatted(self, http, client):
        detail = [{"loc": ["body", "text"], "msg": "field required"}]
        http.return_value = _response(422, {"detail": detail}, "Unprocessable Entity")

        with pytest.raises(BackendError) as exc:
            client.submit_issue({})

        assert exc.value.status_code == 422
        assert exc.value.message == "body.text - field required"
        assert exc.value.detail == detail
        assert exc.value.is_validation_error

    def test_string_detail(self, http, client):
        http.return_value = _response(401, {"detail": "Not authenticated"}, "Unauthorized")

        with pytest.raises(BackendError) as exc:
            client.get_current_user("bad")

        assert exc.value.message == "Not authenticated"
        assert exc.value.is_auth_failure

    def test_unparseable_error_body(self, http, client):
        http.return_value = _response(500, ValueError("no json"), "Internal Server Error")

        with pytest.raises(BackendError) as exc:
            client.get_overall_stats("tok")

        assert exc.value.message == "Ошибка сервера: Internal Server Error"
        assert not exc.value.is_auth_failure

    def test_network_error(self, http, client):
        http.side_effect = requests.ConnectionError("refused")

        with pytest.raises(BackendError) as exc:
            client.list_issues("x")

        assert exc.value.status_code is None
        assert exc.value.message == NETWORK_ERROR
