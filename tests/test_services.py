"""Tests for the per-entity accessors against the fake API."""
import pytest

from procurement import ValidationError
from procurement.models import DocumentRef, EntityKind
from procurement.services import documents, projects, quotes, requirements, rfqs, users, vendors


class TestProjects:

    def test_create_and_list(self, owner_client, fake_api):
        created = projects.create_project(owner_client, "Tower A", location="Pune", deadline="2026-12-31")
        assert created.name == "Tower A"
        assert [p.id for p in projects.get_projects(owner_client)] == [created.id]
        sent = fake_api.calls_to("POST", "/projects")[0][2]
        assert sent == {"name": "Tower A", "description": None, "location": "Pune", "deadline": "2026-12-31"}

    def test_update_sends_only_changed_fields(self, owner_client, fake_api):
        p = projects.create_project(owner_client, "Tower A", location="Pune")
        updated = projects.update_project(owner_client, p.id, location="Mumbai")
        assert updated.location == "Mumbai"
        assert updated.name == "Tower A"
        assert fake_api.calls_to("PUT")[0][2] == {"location": "Mumbai"}

    def test_unknown_update_field_rejected_locally(self, owner_client, fake_api):
        with pytest.raises(ValidationError):
            projects.update_project(owner_client, 1, budget=10)
        assert fake_api.calls == []

    def test_delete(self, owner_client, fake_api):
        p = projects.create_project(owner_client, "Tower A")
        assert projects.delete_project(owner_client, p.id) == {"message": "Deleted"}
        assert projects.get_projects(owner_client) == []


class TestRequirements:

    def test_round_trip_and_total(self, owner_client, fake_api):
        project = projects.create_project(owner_client, "Tower A")
        created = requirements.add_requirement(owner_client, project.id, "Cement", 50, "bags", rate=350)
        fetched = requirements.get_requirement_by_id(owner_client, created.id)
        assert (fetched.item_name, fetched.quantity, fetched.unit, fetched.rate) == ("Cement", 50, "bags", 350)
        assert fetched.total == 17500

    def test_total_unknown_without_rate(self, owner_client, fake_api):
        r = requirements.add_requirement(owner_client, 1, "Steel", 2, "tonnes")
        assert r.total is None

    def test_edit_and_delete(self, owner_client, fake_api):
        r = requirements.add_requirement(owner_client, 1, "Cement", 50, "bags", rate=350)
        updated = requirements.update_requirement(owner_client, r.id, quantity=60, rate=340)
        assert updated.total == 60 * 340
        assert fake_api.calls_to("PUT")[0][2] == {"quantity": 60.0, "rate": 340.0}
        requirements.delete_requirement(owner_client, r.id)
        assert requirements.get_requirements_by_project_id(owner_client, 1) == []

    def test_by_project(self, owner_client, fake_api):
        requirements.add_requirement(owner_client, 1, "Cement", 50, "bags")
        requirements.add_requirement(owner_client, 2, "Sand", 10, "m3")
        found = requirements.get_requirements_by_project_id(owner_client, 1)
        assert [r.item_name for r in found] == ["Cement"]


class TestRfqs:

    @pytest.fixture
    def seeded(self, fake_api):
        return [
            fake_api.add("rfqs", project_id=1, title="Cement", deadline="2026-11-30", status="open"),
            fake_api.add("rfqs", project_id=1, title="Steel", deadline="2026-11-30", status="awarded"),
            fake_api.add("rfqs", project_id=2, title="Sand", deadline="2026-11-30", status="open"),
            fake_api.add("rfqs", project_id=2, title="Bricks", deadline="2026-11-30", status="closed"),
        ]

    def test_open_filter(self, owner_client, seeded):
        assert [r.title for r in rfqs.list_rfqs(owner_client, rfqs.OPEN)] == ["Cement", "Sand"]

    def test_closed_uses_closed_collection(self, owner_client, seeded, fake_api):
        assert [r.title for r in rfqs.list_rfqs(owner_client, rfqs.CLOSED)] == ["Steel", "Bricks"]
        assert fake_api.calls_to("GET", "/rfqs/closed")

    def test_project_scoped(self, owner_client, seeded, fake_api):
        assert [r.title for r in rfqs.list_rfqs(owner_client, rfqs.OPEN, project_id=2)] == ["Sand"]
        assert [r.title for r in rfqs.list_rfqs(owner_client, rfqs.CLOSED, project_id=2)] == ["Bricks"]
        assert fake_api.calls_to("GET", "/rfqs/project/2/closed")

    def test_unfiltered(self, owner_client, seeded):
        assert len(rfqs.list_rfqs(owner_client)) == 4

    def test_unknown_state(self, owner_client, fake_api):
        with pytest.raises(ValidationError):
            rfqs.list_rfqs(owner_client, "pending")
        assert fake_api.calls == []

    def test_create_starts_open(self, owner_client):
        rfq = rfqs.create_rfq(owner_client, 1, "Cement", "2026-11-30", contact_email="buy@rao.in")
        assert rfq.status == "open"
        assert rfq.contact_email == "buy@rao.in"


class TestQuotes:

    def test_create(self, vendor_client, fake_api):
        q = quotes.create_quote(vendor_client, rfq_id=3, vendor_id=9, total_amount=17500)
        assert q.status == "submitted"
        assert fake_api.calls_to("POST", "/quotes")[0][2] == {"rfq_id": 3, "vendor_id": 9, "total_amount": 17500.0}

    def test_update_is_partial(self, owner_client, fake_api, awardable):
        q = awardable["quotes"][0]
        updated = quotes.update_quote(owner_client, q["id"], status="rejected")
        assert updated.status == "rejected"
        assert updated.total_amount == 17500.0
        assert fake_api.calls_to("PUT")[0][2] == {"status": "rejected"}

    def test_string_amount_is_numeric(self, owner_client, awardable):
        found = quotes.get_quotes_by_rfq_id(owner_client, awardable["rfq"]["id"])
        assert found[2].total_amount == pytest.approx(18250.50)

    def test_invalid_status_rejected_locally(self, owner_client, fake_api):
        with pytest.raises(ValidationError):
            quotes.update_quote(owner_client, 1, status="won")
        assert fake_api.calls == []

    def test_by_vendor_and_delete(self, owner_client, awardable):
        assert [q.vendor_id for q in quotes.get_quotes_by_vendor_id(owner_client, 102)] == [102]
        qid = awardable["quotes"][1]["id"]
        assert quotes.delete_quote(owner_client, qid)["message"] == "Deleted"
        assert len(quotes.get_all_quotes(owner_client)) == 2


class TestVendorsAndUsers:

    def test_vendor_by_user(self, vendor_client, vendor_user):
        created = vendors.create_vendor(vendor_client, vendor_user["id"], "Patel Cement", gst_number="27AAP")
        assert vendors.get_vendor_by_user_id(vendor_client, vendor_user["id"]).id == created.id
        assert vendors.update_vendor(vendor_client, created.id, phone="022 555").phone == "022 555"

    def test_updating_own_profile_refreshes_session(self, owner_client, owner, store):
        users.update_user(owner_client, owner["id"], company_name="Rao & Sons")
        assert owner_client.session.get_current_user().company_name == "Rao & Sons"
        assert store.read()["user"]["company_name"] == "Rao & Sons"


class TestDocuments:

    def test_upload_list_download_delete(self, owner_client, fake_api):
        doc = documents.upload_document(owner_client, ("project", 4), "boq.pdf", b"%PDF-1.4")
        assert doc.entity_type is EntityKind.PROJECT
        assert doc.mime_type == "application/pdf"
        form = fake_api.calls_to("POST", "/documents/upload")[0][2]
        assert form == {"entity_type": "project", "entity_id": "4"}

        listed = documents.get_documents_by_entity(owner_client, DocumentRef.of("project", 4))
        assert [d.original_name for d in listed] == ["boq.pdf"]
        assert documents.download_document(owner_client, doc.id) == b"%PDF-1.4"
        documents.delete_document(owner_client, doc.id)
        assert documents.get_documents_by_entity(owner_client, ("project", 4)) == []

    def test_unknown_entity_kind_rejected_locally(self, owner_client, fake_api):
        with pytest.raises(ValidationError) as exc:
            documents.get_documents_by_entity(owner_client, ("invoice", 4))
        assert exc.value.field == "entity_type"
        assert fake_api.calls == []

    def test_kind_parsing_is_case_insensitive(self):
        assert EntityKind.parse("RFQ") is EntityKind.RFQ

    @pytest.mark.parametrize("kind", ["rfq", "quote", "requirement"])
    def test_upload_on_other_entities(self, vendor_client, fake_api, kind):
        doc = documents.upload_document(vendor_client, (kind, 12), "datasheet.xlsx", b"PK\x03\x04")
        assert doc.ref == DocumentRef.of(kind, 12)
        assert [d.id for d in documents.get_documents_by_entity(vendor_client, (kind, 12))] == [doc.id]
        assert documents.download_document(vendor_client, doc.id) == b"PK\x03\x04"


class TestVendorOnboarding:

    def test_vendor_without_profile_can_create_one_and_quote(self, vendor_client, vendor_user):
        vendor = vendors.create_vendor(vendor_client, vendor_user["id"], "Patel Cement", contact_person="Vik")
        assert vendors.get_vendor_by_user_id(vendor_client, vendor_user["id"]).id == vendor.id
        q = quotes.create_quote(vendor_client, rfq_id=5, vendor_id=vendor.id, total_amount=1200)
        revised = quotes.update_quote(vendor_client, q.id, total_amount=1100, status="revised")
        assert (revised.total_amount, revised.status) == (1100.0, "revised")
        quotes.delete_quote(vendor_client, q.id)
        assert quotes.get_quotes_by_vendor_id(vendor_client, vendor.id) == []
