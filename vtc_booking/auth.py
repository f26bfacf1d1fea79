import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .domain.admin.service import authenticate
from .exceptions import MissingCredentialError

logger = logging.getLogger(__name__)

# auto_error=False so a missing header reaches us and gets the 401 envelope
security = HTTPBearer(auto_error=False)


async def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """Guard for admin routes: returns the token claims of the logged-in operator"""
    if not credentials or not credentials.credentials:
        logger.warning("❌ Admin route called without bearer token")
        raise MissingCredentialError()

    claims = authenticate(credentials.credentials)
    logger.debug(f"✅ Admin authenticated: {claims.get('username')}")
    return claims
