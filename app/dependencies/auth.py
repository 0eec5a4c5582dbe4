"""
Authentication dependencies for FastAPI route protection.

The identity comes entirely from the signed token; no database lookup is
made. Role changes are therefore only visible after the user logs in again.
"""

from fastapi import Depends, Request
from fastapi.security import APIKeyHeader

from app.config import settings
from app.schemas import TokenIdentity
from app.services.errors import ForbiddenError, UnauthorizedError
from app.utils.auth import decode_access_token
from app.utils.logger import setup_logger

logger = setup_logger("dependencies.auth")

# Custom header token extraction
token_header = APIKeyHeader(name=settings.auth_header_name, auto_error=False)


def identity_from_token(token: str | None) -> TokenIdentity | None:
    """Resolve a raw token into an identity, or None if it is missing or invalid."""
    if not token:
        return None
    payload = decode_access_token(token)
    if payload is None:
        return None
    user_id = payload.get("id") or payload.get("sub")
    if not user_id:
        return None
    try:
        return TokenIdentity(
            id=user_id,
            is_admin=bool(payload.get("isAdmin", False)),
            username=payload.get("username"),
        )
    except ValueError:
        logger.warning(f"Token carried an unusable identity: {user_id}")
        return None


async def get_current_identity(
    request: Request,
    token: str | None = Depends(token_header),
) -> TokenIdentity:
    """
    Dependency to get the caller's identity from the auth header.
    """
    if not token:
        raise UnauthorizedError("No token, authorization denied")

    identity = identity_from_token(token)
    if identity is None:
        raise UnauthorizedError("Token is not valid")

    request.state.identity = identity
    return identity


async def require_admin(
    identity: TokenIdentity = Depends(get_current_identity),
) -> TokenIdentity:
    """Dependency that only lets administrators through."""
    if not identity.is_admin:
        raise ForbiddenError("Access Denied: Admin privileges required.")
    return identity
