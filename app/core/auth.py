"""
Caller identity.

Token issuance and verification live in front of this service; by the time a
request reaches us the gateway has resolved the user and forwarded it as the
`X-User-Id` header.
"""
from typing import Optional

from fastapi import Header

from app.core.errors import AuthenticationRequiredError


def get_current_user_id(
    x_user_id: Optional[str] = Header(default=None, description="Authenticated user id."),
) -> str:
    if x_user_id is None or not x_user_id.strip():
        raise AuthenticationRequiredError()
    return x_user_id.strip()
