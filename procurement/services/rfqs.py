# rfqs.py
import logging
from typing import List, Optional

from ..api import ApiClient
from ..errors import ValidationError
from ..models import Rfq, RfqCreate, RfqUpdate, build, parse, parse_list, payload

logger = logging.getLogger(__name__)

OPEN = "open"
# "closed" is the server's closed collection: closed and awarded RFQs
CLOSED = "closed"


def create_rfq(client: ApiClient, project_id: int, title: str, deadline: str, **details) -> Rfq:
    data = build(RfqCreate, project_id=project_id, title=title, deadline=deadline, **details)
    return parse(Rfq, client.post("/rfqs", payload(data)).get("rfq"))


def get_rfq_by_id(client: ApiClient, rfq_id: int) -> Rfq:
    return parse(Rfq, client.get(f"/rfqs/{rfq_id}").get("rfq"))


def get_rfqs_by_project_id(client: ApiClient, project_id: int) -> List[Rfq]:
    return parse_list(Rfq, client.get(f"/rfqs/project/{project_id}").get("rfqs"))


def get_all_rfqs(client: ApiClient) -> List[Rfq]:
    return parse_list(Rfq, client.get("/rfqs").get("rfqs"))


def get_closed_rfqs(client: ApiClient) -> List[Rfq]:
    return parse_list(Rfq, client.get("/rfqs/closed").get("rfqs"))


def get_closed_rfqs_by_project_id(client: ApiClient, project_id: int) -> List[Rfq]:
    return parse_list(Rfq, client.get(f"/rfqs/project/{project_id}/closed").get("rfqs"))


def update_rfq(client: ApiClient, rfq_id: int, **changes) -> Rfq:
    data = build(RfqUpdate, **changes)
    return parse(Rfq, client.put(f"/rfqs/{rfq_id}", payload(data)).get("rfq"))


def delete_rfq(client: ApiClient, rfq_id: int) -> dict:
    return client.delete(f"/rfqs/{rfq_id}")


def list_rfqs(client: ApiClient, state: Optional[str] = None, project_id: Optional[int] = None) -> List[Rfq]:
    """Every RFQ listing goes through here.

    ``state=None`` returns the plain collection, ``"open"`` keeps only
    ``status == "open"`` from it, ``"closed"`` reads the dedicated
    closed/awarded collection. ``project_id`` narrows either to one project.
    """
    if state == CLOSED:
        if project_id is None:
            return get_closed_rfqs(client)
        return get_closed_rfqs_by_project_id(client, project_id)
    if state not in (None, OPEN):
        raise ValidationError(f"Unknown RFQ state filter {state!r}", field="state")

    rfqs = get_all_rfqs(client) if project_id is None else get_rfqs_by_project_id(client, project_id)
    if state == OPEN:
        rfqs = [r for r in rfqs if r.status == OPEN]
    return rfqs
