"""FastAPI dependencies for authentication, roles, and idempotency."""

from datetime import datetime
from typing import Optional

import jwt
from fastapi import Depends, Header
from jwt import PyJWTError
from pydantic import BaseModel, Field

from .config import settings
from .database import get_db
from .exceptions import AuthenticationError, AuthorizationError, ValidationError

ROLE_JAMAAH = "jamaah"
ROLE_AGENT = "agent"
ROLE_SELLER = "seller"
ROLE_ADMIN = "admin"

KNOWN_ROLES = {ROLE_JAMAAH, ROLE_AGENT, ROLE_SELLER, ROLE_ADMIN}


class CurrentUser(BaseModel):
    """Authenticated caller resolved from a bearer token."""

    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    roles: list[str] = Field(default_factory=list)

    def has_role(self, *roles: str) -> bool:
        """Return True if the user holds any of ``roles`` or is an admin."""
        return self.is_admin or any(role in self.roles for role in roles)

    @property
    def is_admin(self) -> bool:
        return ROLE_ADMIN in self.roles


def decode_token(token: str) -> CurrentUser:
    """
    Validate a bearer token and build the caller identity.

    Raises:
        AuthenticationError: If the token is invalid, expired or lacks a subject
    """
    try:
        payload = jwt.decode(
            token,
            settings.bearer_token_secret,
            algorithms=["HS256"]
        )
    except PyJWTError as e:
        raise AuthenticationError(detail=f"Token validation failed: {e}")

    user_id = payload.get("sub")
    if user_id is None:
        raise AuthenticationError(detail="Invalid token payload")

    exp = payload.get("exp")
    if exp and datetime.utcnow().timestamp() > exp:
        raise AuthenticationError(detail="Token has expired")

    roles = [role for role in payload.get("roles", []) if role in KNOWN_ROLES]
    if not roles:
        roles = [ROLE_JAMAAH]

    return CurrentUser(
        user_id=str(user_id),
        email=payload.get("email"),
        name=payload.get("name"),
        roles=roles,
    )


def _extract_bearer(authorization: str) -> str:
    try:
        scheme, token = authorization.split()
    except ValueError:
        raise AuthenticationError(detail="Invalid authorization header format")
    if scheme.lower() != "bearer":
        raise AuthenticationError(detail="Invalid authentication scheme")
    return token


async def get_current_user(
    authorization: Optional[str] = Header(None, alias="Authorization")
) -> CurrentUser:
    """
    Authentication dependency that validates Bearer tokens.

    Args:
        authorization: Authorization header with Bearer token

    Returns:
        CurrentUser: Caller identity from the validated token

    Raises:
        AuthenticationError: If token is invalid or missing
    """
    if not authorization:
        raise AuthenticationError(detail="Authorization header missing")
    return decode_token(_extract_bearer(authorization))


async def get_optional_user(
    authorization: Optional[str] = Header(None, alias="Authorization")
) -> Optional[CurrentUser]:
    """Resolve the caller when a token is supplied; anonymous otherwise."""
    if not authorization:
        return None
    return decode_token(_extract_bearer(authorization))


def require_roles(*roles: str):
    """
    Build a dependency that admits only users holding one of ``roles``.

    Admins are always admitted.
    """

    async def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not user.has_role(*roles):
            raise AuthorizationError(required_permissions=list(roles))
        return user

    return dependency


async def get_idempotency_key(
    idempotency_key: str = Header(..., alias="Idempotency-Key")
) -> str:
    """
    Extract and validate the idempotency key from request headers.

    Raises:
        ValidationError: If the key length is out of range
    """
    if len(idempotency_key) < 1 or len(idempotency_key) > 255:
        raise ValidationError(
            detail="Idempotency key must be between 1 and 255 characters"
        )
    return idempotency_key


RequiredAuth = Depends(get_current_user)
OptionalAuth = Depends(get_optional_user)
DatabaseSession = Depends(get_db)
IdempotencyKey = Depends(get_idempotency_key)
AgentAuth = Depends(require_roles(ROLE_AGENT))
SellerAuth = Depends(require_roles(ROLE_SELLER))
AdminAuth = Depends(require_roles(ROLE_ADMIN))
