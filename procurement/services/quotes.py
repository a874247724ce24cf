# quotes.py
from typing import List

from ..api import ApiClient
from ..models import Quote, QuoteCreate, QuoteUpdate, build, parse, parse_list, payload


def create_quote(client: ApiClient, rfq_id: int, vendor_id: int, total_amount: float) -> Quote:
    data = build(QuoteCreate, rfq_id=rfq_id, vendor_id=vendor_id, total_amount=total_amount)
    return parse(Quote, client.post("/quotes", payload(data)).get("quote"))


def get_quote_by_id(client: ApiClient, quote_id: int) -> Quote:
    return parse(Quote, client.get(f"/quotes/{quote_id}").get("quote"))


def get_quotes_by_rfq_id(client: ApiClient, rfq_id: int) -> List[Quote]:
    return parse_list(Quote, client.get(f"/quotes/rfq/{rfq_id}").get("quotes"))


def get_quotes_by_vendor_id(client: ApiClient, vendor_id: int) -> List[Quote]:
    return parse_list(Quote, client.get(f"/quotes/vendor/{vendor_id}").get("quotes"))


def get_all_quotes(client: ApiClient) -> List[Quote]:
    return parse_list(Quote, client.get("/quotes").get("quotes"))


def update_quote(client: ApiClient, quote_id: int, **changes) -> Quote:
    """Partial update: only ``status`` and/or ``total_amount`` as given are sent."""
    data = build(QuoteUpdate, **changes)
    return parse(Quote, client.put(f"/quotes/{quote_id}", payload(data)).get("quote"))


def delete_quote(client: ApiClient, quote_id: int) -> dict:
    return client.delete(f"/quotes/{quote_id}")
