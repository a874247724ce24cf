# formatting.py
# Display helpers: UTC dates and rupee amounts with Indian digit grouping.

from datetime import date, datetime, timezone
from typing import Optional, Union

from dateutil import parser as date_parser

from .models import requirement_total

NOT_AVAILABLE = "N/A"

DateLike = Union[str, date, datetime, None]


def _parse(value: DateLike) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    else:
        # not only ISO: RFC 1123 headers and "March 5, 2025" style strings too
        try:
            dt = date_parser.parse(str(value).strip())
        except (ValueError, OverflowError):
            return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt


def format_date(value: DateLike) -> str:
    dt = _parse(value)
    if dt is None:
        return NOT_AVAILABLE
    return f"{dt:%b} {dt.day}, {dt.year}"


def format_datetime(value: DateLike) -> str:
    dt = _parse(value)
    if dt is None:
        return NOT_AVAILABLE
    return f"{dt:%b} {dt.day}, {dt.year}, {dt:%I:%M %p}"


def group_indian(whole: int) -> str:
    # 1234567 -> 12,34,567
    digits = str(whole)
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_inr(amount: Optional[float], symbol: str = "₹") -> str:
    if amount is None:
        return NOT_AVAILABLE
    sign = "-" if amount < 0 else ""
    text = f"{abs(amount):.2f}"
    whole, frac = text.split(".")
    frac = frac.rstrip("0")
    out = group_indian(int(whole))
    if frac:
        out = f"{out}.{frac}"
    return f"{sign}{symbol}{out}"


def format_requirement_total(quantity: Optional[float], rate: Optional[float]) -> str:
    return format_inr(requirement_total(quantity, rate))
