# session.py
# The current authenticated identity: persisted token + user, shared by every accessor.

import logging
import threading
import time
from typing import Callable, List, Optional

import pydantic
from jose import JWTError, jwt

from .config import settings
from .models import User
from .storage import SessionStore

logger = logging.getLogger(__name__)


class SessionHolder:
    """Holds the token/user pair.

    Reads always go to the persisted store so every caller sees the same
    identity. ``store=None`` means there is no durable storage available and
    every read returns None.
    """

    def __init__(self, store: Optional[SessionStore] = None):
        self.store = store
        self.user: Optional[User] = None
        self._lock = threading.RLock()
        self._listeners: List[Callable[[], None]] = []

    @classmethod
    def from_settings(cls) -> "SessionHolder":
        return cls(SessionStore(settings.SESSION_FILE))

    def add_expiry_listener(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    def get_token(self) -> Optional[str]:
        if self.store is None:
            return None
        token = self.store.get("token")
        return token if isinstance(token, str) and token else None

    def get_current_user(self) -> Optional[User]:
        if self.store is None:
            return None
        raw = self.store.get("user")
        if not raw:
            return None
        try:
            return User.model_validate(raw)
        except pydantic.ValidationError:
            logger.warning("Discarding malformed persisted user")
            return None

    def is_authenticated(self) -> bool:
        return self.get_token() is not None

    def begin(self, token: str, user: User) -> None:
        with self._lock:
            if self.store is not None:
                self.store.set(token=token, user=user.model_dump(mode="json"))
            self.user = user
        logger.info("Signed in as user %s (%s)", user.id, user.role)

    def logout(self) -> None:
        with self._lock:
            if self.store is not None:
                self.store.remove("token", "user")
            if self.user is not None:
                logger.info("Signed out user %s", self.user.id)
            self.user = None

    def expire(self, token: Optional[str]) -> bool:
        """Tear the session down after a 401 seen with ``token``.

        Only the first caller whose token is still the stored one clears the
        session and notifies listeners; later 401s from the same batch of
        in-flight calls are no-ops.
        """
        with self._lock:
            if token is None or self.get_token() != token:
                return False
            self.logout()
        logger.warning("Session expired; cleared persisted credentials")
        for listener in list(self._listeners):
            listener()
        return True

    def validate_token(self) -> bool:
        token = self.get_token()
        if not token:
            return False
        try:
            claims = jwt.get_unverified_claims(token)
        except JWTError:
            # opaque token, nothing to inspect
            return True
        exp = claims.get("exp")
        if exp is None:
            return True
        try:
            return float(exp) > time.time()
        except (TypeError, ValueError):
            logger.warning("Token carries an unreadable exp claim; treating it as expired")
            return False

    def restore(self) -> Optional[User]:
        """Load the persisted identity at start-up, dropping it if the token is no longer valid."""
        user = self.get_current_user()
        token = self.get_token()
        if user is not None and token is not None and self.validate_token():
            self.user = user
            logger.info("Restored session for user %s", user.id)
            return user
        if user is not None or token is not None:
            self.logout()
        return None
