# api.py
# One authenticated request helper behind every entity accessor.

import logging
from typing import Any, Dict, Optional

import requests

from .config import settings
from .errors import ApiError, AuthRequiredError, NetworkError, SessionExpiredError
from .session import SessionHolder

logger = logging.getLogger(__name__)


def _error_message(resp: requests.Response) -> str:
    fallback = f"HTTP error! status: {resp.status_code}"
    try:
        body = resp.json()
    except ValueError:
        return resp.reason or fallback
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return fallback


class ApiClient:
    """Talks to the remote procurement API on behalf of one session."""

    def __init__(self, session: SessionHolder, base_url: Optional[str] = None,
                 timeout: Optional[float] = None, http: Optional[requests.Session] = None):
        self.session = session
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.API_TIMEOUT
        self.http = http or requests.Session()

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, json: Any = None, data: Optional[Dict[str, Any]] = None,
                files: Optional[Dict[str, Any]] = None, auth: bool = True, raw: bool = False) -> Any:
        """Issue one call and return the decoded JSON body (or bytes when ``raw``).

        Raises AuthRequiredError before sending when ``auth`` is set and there
        is no token, SessionExpiredError on 401 (after tearing the session
        down), ApiError on any other non-2xx, NetworkError when the API cannot
        be reached.
        """
        headers = {}
        token = None
        if auth:
            token = self.session.get_token()
            if not token:
                raise AuthRequiredError()
            headers["Authorization"] = f"Bearer {token}"

        try:
            resp = self.http.request(method, self.url(path), json=json, data=data, files=files,
                                     headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise NetworkError() from e

        logger.debug("%s %s -> %s", method, path, resp.status_code)

        if resp.status_code == 401 and auth:
            self.session.expire(token)
            raise SessionExpiredError()
        if not resp.ok:
            raise ApiError(resp.status_code, _error_message(resp))

        if raw:
            return resp.content
        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as e:
            raise ApiError(resp.status_code, "Malformed JSON in API response") from e

    def get(self, path: str, **kwargs) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, body: Any = None, **kwargs) -> Any:
        return self.request("POST", path, json=body, **kwargs)

    def put(self, path: str, body: Any = None, **kwargs) -> Any:
        return self.request("PUT", path, json=body, **kwargs)

    def delete(self, path: str, **kwargs) -> Any:
        return self.request("DELETE", path, **kwargs)
