"""
Authentication for the Automagixx chatbot admin API.

Admin routes require the ``X-API-Key`` header when ADMIN_API_KEY is set.
With no key configured the admin API is open, as in local development.
"""

import logging
import secrets
from typing import Optional

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from ..services import Services, get_services

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"

api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


async def require_admin(
    api_key: Optional[str] = Security(api_key_header),
    services: Services = Depends(get_services),
) -> None:
    """FastAPI dependency guarding admin routes."""
    expected = services.settings.admin_api_key if services.settings else None
    if not expected:
        return

    if not api_key or not secrets.compare_digest(api_key, expected):
        logger.warning("Rejected admin request with missing or invalid API key")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )
