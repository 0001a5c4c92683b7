import hashlib
import hmac

from fastapi import Request

from config import settings
from exceptions import AuthenticationError, ForbiddenError


def client_id_for(key: str) -> str:
    """Stable, non-reversible client identity derived from an API key."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def authenticate(request: Request) -> str | None:
    """Resolve the calling client from its Bearer API key.

    Args:
        request: FastAPI request object.

    Returns:
        Client ID, or None if no auth header is present.

    Raises:
        AuthenticationError: If auth header present but key is invalid.
    """
    auth_header = request.headers.get("Authorization", "")

    if not auth_header:
        return None  # No auth: public request

    if not auth_header.startswith("Bearer "):
        raise AuthenticationError(
            "Invalid Authorization header format. Expected: Bearer <key>"
        )

    provided_key = auth_header[7:]  # Strip "Bearer "
    if not provided_key:
        raise AuthenticationError("Empty API key")

    if is_admin_key(provided_key):
        return client_id_for(provided_key)

    if settings.api_key and not hmac.compare_digest(provided_key, settings.api_key):
        raise AuthenticationError("Invalid API key")

    # No API key configured: every key is its own client (dev mode)
    return client_id_for(provided_key)


def is_admin_key(key: str) -> bool:
    return bool(settings.admin_api_key) and hmac.compare_digest(key, settings.admin_api_key)


def require_client(request: Request) -> str:
    """Route dependency: the authenticated client ID.

    Raises:
        AuthenticationError: If the request carries no API key.
    """
    client_id = getattr(request.state, "client_id", None)
    if not client_id:
        raise AuthenticationError("Authentication required")
    return client_id


def require_admin(request: Request) -> str:
    """Route dependency: the client ID, only for the admin key.

    Raises:
        AuthenticationError: If unauthenticated.
        ForbiddenError: If authenticated with a non-admin key.
    """
    client_id = require_client(request)
    if not getattr(request.state, "is_admin", False):
        raise ForbiddenError("Access denied. Admin only.")
    return client_id
