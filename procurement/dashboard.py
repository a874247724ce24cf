# dashboard.py
# Read-side views: fetch related collections side by side, join them by foreign key.
#
# Collections are fetched concurrently and independently. A collection that
# fails comes back empty and its message lands in ``errors``; the rest of the
# view still renders. Only the primary entity of a detail view, and
# session-level failures (no token / expired session), are raised.

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field

from .api import ApiClient
from .config import settings
from .errors import AuthRequiredError, ProcurementError, SessionExpiredError
from .models import Document, Project, Quote, Requirement, Rfq, User, Vendor
from .services import documents as document_service
from .services import projects as project_service
from .services import quotes as quote_service
from .services import requirements as requirement_service
from .services import rfqs as rfq_service
from .services import vendors as vendor_service

logger = logging.getLogger(__name__)

SESSION_ERRORS = (AuthRequiredError, SessionExpiredError)


def gather(fetchers: Dict[str, Callable[[], Any]], defaults: Optional[Dict[str, Any]] = None,
           required: Iterable[str] = (), workers: Optional[int] = None) -> Tuple[Dict[str, Any], Dict[str, str]]:
    """Run every fetcher, wait for all of them, and split results from failures.

    A failed fetcher's result is its entry in ``defaults`` (``[]`` when absent).
    Failures of ``required`` fetchers and session-level failures are re-raised
    once everything has settled.
    """
    defaults = defaults or {}
    required = set(required)
    results: Dict[str, Any] = {}
    errors: Dict[str, str] = {}
    if not fetchers:
        return results, errors

    workers = max(1, min(workers or settings.DASHBOARD_WORKERS, len(fetchers)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {name: pool.submit(fn) for name, fn in fetchers.items()}

    raised: Optional[ProcurementError] = None
    for name, future in futures.items():
        try:
            results[name] = future.result()
        except ProcurementError as e:
            if name in required or isinstance(e, SESSION_ERRORS):
                raised = raised or e
                continue
            logger.warning("Fetching %s failed, showing it empty: %s", name, e)
            results[name] = defaults.get(name, [])
            errors[name] = str(e)
    if raised is not None:
        raise raised
    return results, errors


def _quote_rank(q: Quote):
    return q.status != "rejected", q.updated_at or q.created_at or ""


def _by_rfq(quotes: List[Quote]) -> Dict[int, Quote]:
    """One quote per RFQ: a live one over a rejected one, then the most recently updated."""
    best: Dict[int, Quote] = {}
    for q in quotes:
        current = best.get(q.rfq_id)
        if current is None or _quote_rank(q) > _quote_rank(current):
            best[q.rfq_id] = q
    return best


class OwnerDashboard(BaseModel):
    projects: List[Project] = Field(default_factory=list)
    errors: Dict[str, str] = Field(default_factory=dict)


class VendorRfqRow(BaseModel):
    rfq: Rfq
    quote: Optional[Quote] = None

    @property
    def quoted(self) -> bool:
        return self.quote is not None

    @property
    def label(self) -> str:
        return "already quoted" if self.quoted else "open to apply"


class VendorDashboard(BaseModel):
    vendor: Optional[Vendor] = None
    quotes: List[Quote] = Field(default_factory=list)
    open_rfqs: List[Rfq] = Field(default_factory=list)
    closed_rfqs: List[Rfq] = Field(default_factory=list)
    rows: List[VendorRfqRow] = Field(default_factory=list)
    closed_rows: List[VendorRfqRow] = Field(default_factory=list)
    errors: Dict[str, str] = Field(default_factory=dict)

    @property
    def pending_quotes(self) -> List[Quote]:
        return [q for q in self.quotes if q.is_pending]

    @property
    def won_quotes(self) -> List[Quote]:
        return [q for q in self.quotes if q.status == "accepted"]


class ProjectView(BaseModel):
    project: Project
    documents: List[Document] = Field(default_factory=list)
    requirements: List[Requirement] = Field(default_factory=list)
    open_rfqs: List[Rfq] = Field(default_factory=list)
    closed_rfqs: List[Rfq] = Field(default_factory=list)
    quotes: Dict[int, List[Quote]] = Field(default_factory=dict)
    errors: Dict[str, str] = Field(default_factory=dict)

    @property
    def requirements_total(self) -> float:
        return sum(r.total for r in self.requirements if r.total is not None)

    def quotes_for(self, rfq_id: int) -> List[Quote]:
        return self.quotes.get(rfq_id, [])


class RfqView(BaseModel):
    rfq: Rfq
    quotes: List[Quote] = Field(default_factory=list)
    documents: List[Document] = Field(default_factory=list)
    errors: Dict[str, str] = Field(default_factory=dict)

    @property
    def awarded_quote(self) -> Optional[Quote]:
        return next((q for q in self.quotes if q.status == "accepted"), None)


class ClosedRfqView(BaseModel):
    rfq: Rfq
    documents: List[Document] = Field(default_factory=list)
    vendor_quote: Optional[Quote] = None
    errors: Dict[str, str] = Field(default_factory=dict)


def owner_dashboard(client: ApiClient) -> OwnerDashboard:
    results, errors = gather({"projects": lambda: project_service.get_projects(client)})
    return OwnerDashboard(projects=results["projects"], errors=errors)


def vendor_dashboard(client: ApiClient, user: User) -> VendorDashboard:
    results, errors = gather(
        {
            "vendor": lambda: vendor_service.get_vendor_by_user_id(client, user.id),
            "open_rfqs": lambda: rfq_service.list_rfqs(client, rfq_service.OPEN),
            "closed_rfqs": lambda: rfq_service.list_rfqs(client, rfq_service.CLOSED),
        },
        defaults={"vendor": None},
    )
    vendor = results["vendor"]

    quotes: List[Quote] = []
    if vendor is not None:
        more, quote_errors = gather({"quotes": lambda: quote_service.get_quotes_by_vendor_id(client, vendor.id)})
        quotes = more["quotes"]
        errors.update(quote_errors)

    mine = _by_rfq(quotes)
    return VendorDashboard(
        vendor=vendor,
        quotes=quotes,
        open_rfqs=results["open_rfqs"],
        closed_rfqs=results["closed_rfqs"],
        rows=[VendorRfqRow(rfq=r, quote=mine.get(r.id)) for r in results["open_rfqs"]],
        closed_rows=[VendorRfqRow(rfq=r, quote=mine.get(r.id)) for r in results["closed_rfqs"]],
        errors=errors,
    )


def project_view(client: ApiClient, project_id: int) -> ProjectView:
    results, errors = gather(
        {
            "project": lambda: project_service.get_project_by_id(client, project_id),
            "documents": lambda: document_service.get_documents_by_entity(client, ("project", project_id)),
            "requirements": lambda: requirement_service.get_requirements_by_project_id(client, project_id),
            "open_rfqs": lambda: rfq_service.list_rfqs(client, rfq_service.OPEN, project_id=project_id),
            "closed_rfqs": lambda: rfq_service.list_rfqs(client, rfq_service.CLOSED, project_id=project_id),
        },
        required=("project",),
    )

    rfq_ids = [r.id for r in results["open_rfqs"] + results["closed_rfqs"]]
    quote_results, quote_errors = gather(
        {f"quotes:{rfq_id}": (lambda rfq_id=rfq_id: quote_service.get_quotes_by_rfq_id(client, rfq_id))
         for rfq_id in rfq_ids}
    )
    errors.update(quote_errors)

    return ProjectView(
        project=results["project"],
        documents=results["documents"],
        requirements=results["requirements"],
        open_rfqs=results["open_rfqs"],
        closed_rfqs=results["closed_rfqs"],
        quotes={rfq_id: quote_results[f"quotes:{rfq_id}"] for rfq_id in rfq_ids},
        errors=errors,
    )


def rfq_view(client: ApiClient, rfq_id: int) -> RfqView:
    results, errors = gather(
        {
            "rfq": lambda: rfq_service.get_rfq_by_id(client, rfq_id),
            "quotes": lambda: quote_service.get_quotes_by_rfq_id(client, rfq_id),
            "documents": lambda: document_service.get_documents_by_entity(client, ("rfq", rfq_id)),
        },
        required=("rfq",),
    )
    return RfqView(rfq=results["rfq"], quotes=results["quotes"], documents=results["documents"], errors=errors)


def closed_rfq_view(client: ApiClient, rfq_id: int, vendor_id: int) -> ClosedRfqView:
    def vendor_quote():
        found = quote_service.get_quotes_by_rfq_id(client, rfq_id)
        return next((q for q in found if q.vendor_id == vendor_id), None)

    results, errors = gather(
        {
            "rfq": lambda: rfq_service.get_rfq_by_id(client, rfq_id),
            "documents": lambda: document_service.get_documents_by_entity(client, ("rfq", rfq_id)),
            "vendor_quote": vendor_quote,
        },
        defaults={"vendor_quote": None},
        required=("rfq",),
    )
    return ClosedRfqView(rfq=results["rfq"], documents=results["documents"],
                         vendor_quote=results["vendor_quote"], errors=errors)
