# vendors.py
from typing import List, Optional

from ..api import ApiClient
from ..models import Vendor, VendorCreate, VendorUpdate, build, parse, parse_list, payload


def create_vendor(client: ApiClient, user_id: int, company_name: str, contact_person: Optional[str] = None,
                  phone: Optional[str] = None, email: Optional[str] = None, address: Optional[str] = None,
                  gst_number: Optional[str] = None) -> Vendor:
    data = build(VendorCreate, user_id=user_id, company_name=company_name, contact_person=contact_person,
                 phone=phone, email=email, address=address, gst_number=gst_number)
    return parse(Vendor, client.post("/vendors", payload(data)).get("vendor"))


def get_vendor_by_id(client: ApiClient, vendor_id: int) -> Vendor:
    return parse(Vendor, client.get(f"/vendors/{vendor_id}").get("vendor"))


def get_vendor_by_user_id(client: ApiClient, user_id: int) -> Vendor:
    return parse(Vendor, client.get(f"/vendors/user/{user_id}").get("vendor"))


def get_all_vendors(client: ApiClient) -> List[Vendor]:
    return parse_list(Vendor, client.get("/vendors").get("vendors"))


def update_vendor(client: ApiClient, vendor_id: int, **changes) -> Vendor:
    data = build(VendorUpdate, **changes)
    return parse(Vendor, client.put(f"/vendors/{vendor_id}", payload(data)).get("vendor"))


def delete_vendor(client: ApiClient, vendor_id: int) -> dict:
    return client.delete(f"/vendors/{vendor_id}")
