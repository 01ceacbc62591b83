"""Admin guard for operator endpoints.

Tokens are issued by the CMS login flow; this service only verifies them.
"""

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Cookie, Depends, Header

from app.core import security
from app.core.exceptions import ForbiddenError, UnauthorizedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdminIdentity:
    id: str
    email: str | None
    role: str


async def get_access_token(
    access_token: Annotated[str | None, Cookie()] = None,
    authorization: Annotated[str | None, Header()] = None,
) -> str:
    """Extract the access token from the cookie, falling back to a Bearer header."""
    if access_token:
        return access_token
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    raise UnauthorizedError()


async def get_token_payload(token: str = Depends(get_access_token)) -> dict:
    payload = security.decode_token(token)
    if payload is None or payload.get("type") != "access" or not payload.get("sub"):
        raise UnauthorizedError("Could not validate credentials")
    return payload


async def require_admin(payload: dict = Depends(get_token_payload)) -> AdminIdentity:
    if payload.get("role") != "admin":
        logger.warning("Non-admin %s denied access to admin endpoint", payload.get("sub"))
        raise ForbiddenError("Administrator privileges required")
    return AdminIdentity(id=str(payload["sub"]), email=payload.get("email"), role="admin")
