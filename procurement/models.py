# models.py
# Pydantic models for API payloads + small helpers

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError

Role = Literal["project_owner", "vendor"]
RfqStatus = Literal["open", "closed", "awarded"]
QuoteStatus = Literal["draft", "submitted", "revised", "accepted", "rejected"]


class _Payload(BaseModel):
    """Request bodies; unknown fields are a caller bug, not something to drop."""
    model_config = ConfigDict(extra="forbid")


class User(BaseModel):
    id: int
    name: str
    email: str
    role: str
    company_name: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    gst_number: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class RegisterData(_Payload):
    name: str
    email: EmailStr
    password: str
    role: Role = "project_owner"
    company_name: str
    contact_person: str
    phone: Optional[str] = None
    address: Optional[str] = None
    gst_number: str


class UserUpdate(_Payload):
    name: Optional[str] = None
    email: Optional[str] = None
    company_name: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    gst_number: Optional[str] = None


class Project(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    location: Optional[str] = None
    deadline: Optional[str] = None
    owner_id: int
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ProjectCreate(_Payload):
    name: str
    description: Optional[str] = None
    location: Optional[str] = None
    deadline: Optional[str] = None


class ProjectUpdate(_Payload):
    name: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    deadline: Optional[str] = None


class Requirement(BaseModel):
    id: int
    project_id: int
    item_name: str
    description: Optional[str] = None
    quantity: float
    unit: str
    rate: Optional[float] = None
    category: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def total(self) -> Optional[float]:
        return requirement_total(self.quantity, self.rate)


class RequirementCreate(_Payload):
    project_id: int
    item_name: str
    description: Optional[str] = None
    quantity: float
    unit: str
    rate: Optional[float] = None
    category: Optional[str] = None


class RequirementUpdate(_Payload):
    item_name: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[float] = None
    unit: Optional[str] = None
    rate: Optional[float] = None
    category: Optional[str] = None


class Rfq(BaseModel):
    id: int
    project_id: int
    custom_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    deadline: str
    status: RfqStatus = "open"
    contact_person: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    special_requirements: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class RfqCreate(_Payload):
    project_id: int
    title: str
    description: Optional[str] = None
    deadline: str
    contact_person: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    special_requirements: Optional[str] = None


class RfqUpdate(_Payload):
    title: Optional[str] = None
    description: Optional[str] = None
    deadline: Optional[str] = None
    status: Optional[RfqStatus] = None
    contact_person: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    special_requirements: Optional[str] = None


class Quote(BaseModel):
    id: int
    custom_id: Optional[str] = None
    rfq_custom_id: Optional[str] = None
    vendor_custom_id: Optional[str] = None
    rfq_id: int
    vendor_id: int
    status: QuoteStatus = "submitted"
    # the API sometimes sends numeric strings here
    total_amount: float
    project_details: Optional[Dict[str, Any]] = None
    rfq_details: Optional[Dict[str, Any]] = None
    vendor_details: Optional[Dict[str, Any]] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status not in ("accepted", "rejected")


class QuoteCreate(_Payload):
    rfq_id: int
    vendor_id: int
    total_amount: float


class QuoteUpdate(_Payload):
    status: Optional[QuoteStatus] = None
    total_amount: Optional[float] = None


class Vendor(BaseModel):
    id: int
    user_id: int
    company_name: str
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    gst_number: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class VendorCreate(_Payload):
    user_id: int
    company_name: str
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    gst_number: Optional[str] = None


class VendorUpdate(_Payload):
    company_name: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    gst_number: Optional[str] = None


class EntityKind(str, Enum):
    PROJECT = "project"
    RFQ = "rfq"
    QUOTE = "quote"
    REQUIREMENT = "requirement"

    @classmethod
    def parse(cls, value) -> "EntityKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            allowed = ", ".join(k.value for k in cls)
            raise ValidationError(
                f"Unknown document entity type {value!r} (expected one of: {allowed})",
                field="entity_type",
            ) from None


class DocumentRef(BaseModel):
    kind: EntityKind
    id: int

    @classmethod
    def of(cls, kind, entity_id: int) -> "DocumentRef":
        return cls(kind=EntityKind.parse(kind), id=entity_id)


class Document(BaseModel):
    id: int
    entity_type: EntityKind
    entity_id: int
    filename: str
    original_name: str
    file_path: str
    file_size: int
    mime_type: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def ref(self) -> DocumentRef:
        return DocumentRef(kind=self.entity_type, id=self.entity_id)


def requirement_total(quantity: Optional[float], rate: Optional[float]) -> Optional[float]:
    if quantity is None or rate is None:
        return None
    return quantity * rate


def payload(model: BaseModel) -> Dict[str, Any]:
    """Only the fields the caller actually set, so updates stay partial."""
    return model.model_dump(exclude_unset=True, mode="json")


def parse_list(model, items: Optional[List[Dict[str, Any]]]) -> list:
    return [parse(model, x) for x in (items or [])]


def build(model, **fields):
    """Construct a request model, reporting bad input as our ValidationError."""
    try:
        return model(**fields)
    except PydanticValidationError as e:
        err = e.errors()[0]
        loc = err.get("loc") or ()
        field = str(loc[0]) if loc else None
        raise ValidationError(f"Invalid {field or 'input'}: {err['msg']}", field=field) from None


def parse(model, raw: Any):
    """Validate one entity from a response body."""
    try:
        return model.model_validate(raw)
    except PydanticValidationError as e:
        raise ValidationError(f"Unexpected {model.__name__} in API response: {e.errors()[0]['msg']}") from None
