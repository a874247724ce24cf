"""
Shared pytest fixtures for the procurement client tests.

Every test talks to FakeApi (tests/fake_api.py) instead of a real server:
the ``fake_api`` fixture patches requests.Session.request for the duration
of the test. Session files live in tmp_path.
"""
import pytest
import requests

from fake_api import BASE_URL, FakeApi
from procurement import ApiClient, SessionHolder, SessionStore
from procurement.models import User


@pytest.fixture
def fake_api(monkeypatch):
    api = FakeApi()
    monkeypatch.setattr(requests.Session, "request", api.handle)
    return api


@pytest.fixture
def store(tmp_path):
    return SessionStore(tmp_path / "session.json")


@pytest.fixture
def session(store):
    return SessionHolder(store)


@pytest.fixture
def client(fake_api, session):
    """Signed-out client."""
    return ApiClient(session, base_url=BASE_URL)


@pytest.fixture
def owner(fake_api):
    return fake_api.add_user(name="Asha Rao", email="asha@example.com", role="project_owner",
                             company_name="Rao Builders")


@pytest.fixture
def owner_client(client, fake_api, owner):
    """Client signed in as a project owner."""
    client.session.begin(fake_api.issue_token(owner["id"]), User.model_validate(owner))
    return client


@pytest.fixture
def vendor_user(fake_api):
    return fake_api.add_user(name="Vik Patel", email="vik@example.com", role="vendor",
                             company_name="Patel Cement")


@pytest.fixture
def vendor_client(client, fake_api, vendor_user):
    client.session.begin(fake_api.issue_token(vendor_user["id"]), User.model_validate(vendor_user))
    return client


@pytest.fixture
def awardable(fake_api, owner):
    """One project with an open RFQ and three submitted quotes."""
    project = fake_api.add("projects", name="Tower A", owner_id=owner["id"])
    rfq = fake_api.add("rfqs", project_id=project["id"], title="Cement supply",
                       deadline="2026-11-30", status="open")
    quotes = [
        fake_api.add("quotes", rfq_id=rfq["id"], vendor_id=vid, status="submitted", total_amount=amount)
        for vid, amount in ((101, 17500.0), (102, 16800.0), (103, "18250.50"))
    ]
    return {"project": project, "rfq": rfq, "quotes": quotes}
