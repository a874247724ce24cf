# errors.py
# Error taxonomy shared by the request helper, accessors and orchestrators

from typing import Optional


class ProcurementError(Exception):
    """Base class for every error raised by the procurement client."""


class AuthRequiredError(ProcurementError):
    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class ValidationError(ProcurementError):
    """A client-side check failed before anything was sent."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field
        self.message = message


class ApiError(ProcurementError):
    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message

    def __repr__(self):
        return f"{type(self).__name__}(status={self.status}, message={self.message!r})"


class AuthError(ApiError):
    """Credentials were rejected by /auth/login."""


class SessionExpiredError(ApiError):
    def __init__(self, message: str = "Session expired. Please log in again."):
        super().__init__(401, message)


class NetworkError(ProcurementError):
    def __init__(self, message: str = (
            "Failed to connect to the server. Please check your network "
            "connection and ensure the backend server is running.")):
        super().__init__(message)


class AwardError(ProcurementError):
    """An award stopped part way. ``progress`` records what already went through."""

    def __init__(self, message: str, step, progress, cause: ProcurementError):
        super().__init__(message)
        self.step = step
        self.progress = progress
        self.cause = cause
