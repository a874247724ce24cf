# procurement
# Client for the procurement REST API: session handling, entity accessors,
# the quote award workflow and the dashboard views built on them.

from .api import ApiClient
from .errors import (
    ApiError,
    AuthError,
    AuthRequiredError,
    AwardError,
    NetworkError,
    ProcurementError,
    SessionExpiredError,
    ValidationError,
)
from .session import SessionHolder
from .storage import SessionStore

__all__ = [
    "ApiClient",
    "ApiError",
    "AuthError",
    "AuthRequiredError",
    "AwardError",
    "NetworkError",
    "ProcurementError",
    "SessionExpiredError",
    "SessionHolder",
    "SessionStore",
    "ValidationError",
]
