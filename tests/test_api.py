"""Tests for the shared request helper: auth header, error classification, 401 teardown."""
import threading

import pytest
import requests

from fake_api import BASE_URL
from procurement import (
    ApiClient,
    ApiError,
    AuthRequiredError,
    NetworkError,
    SessionExpiredError,
    SessionHolder,
)
from procurement.models import User
from procurement.services import projects


class TestRequest:

    def test_sends_bearer_token(self, owner_client, fake_api, monkeypatch):
        seen = {}

        def spy(http_session, method, url, **kwargs):
            seen.update(kwargs.get("headers") or {})
            return fake_api.handle(method, url, **kwargs)

        monkeypatch.setattr(requests.Session, "request", spy)
        projects.get_projects(owner_client)
        assert seen["Authorization"] == "Bearer " + owner_client.session.get_token()

    def test_no_token_fails_before_any_call(self, client, fake_api):
        with pytest.raises(AuthRequiredError):
            projects.get_projects(client)
        assert fake_api.calls == []

    def test_no_storage_means_no_token(self, fake_api):
        client = ApiClient(SessionHolder(None), base_url=BASE_URL)
        with pytest.raises(AuthRequiredError, match="Authentication required"):
            projects.create_project(client, "Tower B")
        assert fake_api.calls == []

    def test_error_message_from_body(self, owner_client, fake_api):
        fake_api.fail("GET", "/projects", status=500, message="Database unavailable")
        with pytest.raises(ApiError) as exc:
            projects.get_projects(owner_client)
        assert exc.value.status == 500
        assert exc.value.message == "Database unavailable"

    def test_missing_route_is_api_error(self, owner_client):
        with pytest.raises(ApiError) as exc:
            projects.get_project_by_id(owner_client, 999)
        assert exc.value.status == 404

    def test_connection_failure_is_network_error(self, owner_client, fake_api):
        fake_api.fail("GET", "/projects", network=True)
        with pytest.raises(NetworkError, match="Failed to connect"):
            projects.get_projects(owner_client)
        # a transport failure does not end the session
        assert owner_client.session.is_authenticated()

    def test_timeout_is_network_error(self, owner_client, fake_api):
        fake_api.fail("GET", "/projects", timeout=True)
        with pytest.raises(NetworkError):
            projects.get_projects(owner_client)
        assert owner_client.session.is_authenticated()

    def test_configured_timeout_is_passed_through(self, owner, fake_api, session, monkeypatch):
        seen = {}

        def spy(http_session, method, url, **kwargs):
            seen["timeout"] = kwargs.get("timeout")
            return fake_api.handle(method, url, **kwargs)

        monkeypatch.setattr(requests.Session, "request", spy)
        client = ApiClient(session, base_url=BASE_URL, timeout=2.5)
        client.session.begin(fake_api.issue_token(owner["id"]), User.model_validate(owner))
        projects.get_projects(client)
        assert seen["timeout"] == 2.5

    def test_json_error_without_message(self, owner_client, fake_api):
        fake_api.fail("GET", "/projects", status=500, body=b'{"error": "boom"}')
        with pytest.raises(ApiError) as exc:
            projects.get_projects(owner_client)
        assert exc.value.message == "HTTP error! status: 500"

    def test_non_json_error_uses_reason(self, owner_client, fake_api):
        fake_api.fail("GET", "/projects", status=502, body=b"<html>upstream down</html>")
        with pytest.raises(ApiError) as exc:
            projects.get_projects(owner_client)
        assert exc.value.status == 502
        assert exc.value.message == "Bad Gateway"

    def test_non_json_error_without_reason(self, owner_client, fake_api):
        fake_api.fail("GET", "/projects", status=503, body=b"")
        with pytest.raises(ApiError) as exc:
            projects.get_projects(owner_client)
        assert exc.value.message == "HTTP error! status: 503"


class TestSessionExpiry:

    def test_401_clears_session(self, owner_client, fake_api, store):
        fake_api.revoke(owner_client.session.get_token())
        with pytest.raises(SessionExpiredError) as exc:
            projects.get_projects(owner_client)
        assert exc.value.status == 401
        assert owner_client.session.get_token() is None
        assert owner_client.session.get_current_user() is None
        assert store.read() == {}

    def test_401_notifies_listener(self, owner_client, fake_api):
        fired = []
        owner_client.session.add_expiry_listener(lambda: fired.append(True))
        fake_api.revoke(owner_client.session.get_token())
        with pytest.raises(SessionExpiredError):
            projects.get_projects(owner_client)
        assert fired == [True]

    def test_concurrent_401s_clear_once(self, owner_client, fake_api, store):
        n = 5
        fake_api.revoke(owner_client.session.get_token())
        # every call reads the token and reaches the server before any 401 is handled
        fake_api.barrier = threading.Barrier(n)
        fired = []
        owner_client.session.add_expiry_listener(lambda: fired.append(True))
        removals = []
        original_remove = store.remove

        def counting_remove(*keys):
            if "token" in store.read():
                removals.append(keys)
            original_remove(*keys)

        store.remove = counting_remove
        errors = []

        def call():
            try:
                projects.get_projects(owner_client)
            except SessionExpiredError as e:
                errors.append(e)

        threads = [threading.Thread(target=call) for _ in range(n)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        assert len(errors) == n
        assert fired == [True]
        assert len(removals) == 1
        assert store.read() == {}

    def test_401_after_relogin_keeps_new_session(self, owner_client, fake_api, owner):
        old = owner_client.session.get_token()
        new = fake_api.issue_token(owner["id"], token="fresh-token")
        owner_client.session.begin(new, owner_client.session.get_current_user())
        # a late 401 for the old token must not log the new session out
        assert owner_client.session.expire(old) is False
        assert owner_client.session.get_token() == "fresh-token"
