# auth.py
# Login / registration / password reset; successful sign-ins are persisted on the session.

import logging
from typing import Optional, Tuple

from ..api import ApiClient
from ..errors import ApiError, AuthError, ValidationError
from ..models import RegisterData, User, build, parse, payload

logger = logging.getLogger(__name__)

# checked in this order, before anything is sent
REQUIRED_REGISTRATION_FIELDS = [
    ("name", "Full name is required"),
    ("email", "Email is required"),
    ("password", "Password is required"),
    ("company_name", "Company name is required"),
    ("contact_person", "Contact person is required"),
    ("gst_number", "GST number is required"),
]

MIN_PASSWORD_LENGTH = 6


def _signed_in(client: ApiClient, body: dict) -> Tuple[User, str]:
    token = body.get("token")
    raw_user = body.get("user")
    if not token or not raw_user:
        raise ApiError(200, "Malformed authentication response")
    user = parse(User, raw_user)
    client.session.begin(token, user)
    return user, token


def login(client: ApiClient, email: str, password: str) -> Tuple[User, str]:
    try:
        body = client.post("/auth/login", {"email": email, "password": password}, auth=False)
    except ApiError as e:
        if e.status in (400, 401):
            logger.info("Login rejected with status %s", e.status)
            raise AuthError(e.status, e.message) from e
        raise
    return _signed_in(client, body)


def register(client: ApiClient, name: str, email: str, password: str, company_name: str,
             contact_person: str, gst_number: str, role: str = "project_owner",
             phone: Optional[str] = None, address: Optional[str] = None) -> Tuple[User, str]:
    fields = {
        "name": name, "email": email, "password": password,
        "company_name": company_name, "contact_person": contact_person,
        "gst_number": gst_number,
    }
    for field, message in REQUIRED_REGISTRATION_FIELDS:
        value = fields[field]
        if value is None or not str(value).strip():
            raise ValidationError(message, field=field)

    optional = {k: v for k, v in (("phone", phone), ("address", address)) if v and v.strip()}
    data = build(RegisterData, role=role, **optional, **fields)

    body = client.post("/auth/register", payload(data), auth=False)
    return _signed_in(client, body)


def logout(client: ApiClient) -> None:
    client.session.logout()


def forgot_password(client: ApiClient, email: str) -> dict:
    if not email or not email.strip():
        raise ValidationError("Email is required", field="email")
    return client.post("/auth/forgot-password", {"email": email.strip()}, auth=False)


def reset_password(client: ApiClient, token: str, new_password: str, confirm_password: str) -> dict:
    if not token:
        raise ValidationError("Reset token is missing", field="token")
    if new_password != confirm_password:
        raise ValidationError("Passwords do not match", field="confirm_password")
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long", field="new_password")
    return client.post("/auth/reset-password", {"token": token, "newPassword": new_password}, auth=False)
