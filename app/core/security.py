"""Provides shared-secret security for the gateway endpoints."""

import logging

from fastapi import Depends
from fastapi import Request
from fastapi.security import APIKeyHeader

from app.core.config import Settings
from app.core.exceptions import AuthorizationError

# Initialize logger
logger = logging.getLogger(__name__)

API_KEY_HEADER_NAME = "x-internal-api-key"

# auto_error is off so a missing header produces our 401 envelope instead of FastAPI's 403
api_key_header = APIKeyHeader(name=API_KEY_HEADER_NAME, auto_error=False)


def get_settings(request: Request) -> Settings:
    """Returns the settings the application was created with."""
    return request.app.state.settings


def is_authorized(credential: str | None, secret: str | None) -> bool:
    """True iff a credential was supplied and equals the configured secret exactly."""
    if not credential or not secret:
        return False
    return credential == secret


async def verify_api_key(
    key: str | None = Depends(api_key_header),
    settings: Settings = Depends(get_settings),
) -> bool:
    """Verifies the x-internal-api-key header against the configured shared secret.

    Used as a FastAPI dependency to protect routes. It runs before the request
    body is read.

    Args:
        key: The value of the 'x-internal-api-key' header, if any.
        settings: Application settings holding the shared secret.

    Returns:
        True if the credential is valid.

    Raises:
        AuthorizationError: If the header is missing or does not match.
    """
    if not is_authorized(key, settings.internal_api_key):
        logger.warning("Rejected request with %s shared secret", "missing" if not key else "invalid")
        raise AuthorizationError()
    return True
