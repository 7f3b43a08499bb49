"""API authentication using bearer session tokens

Sessions are issued by the external auth service; this module only resolves
a token to a trusted user ID.
"""
import logging
from typing import Optional
from fastapi import Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from microhabits.db import queries
from microhabits.db.connection import db
from microhabits.exceptions import AuthenticationError
from microhabits.gamification import utc_now

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> str:
    """
    Resolve the caller's user ID from the Authorization header

    Args:
        credentials: HTTP bearer credentials

    Returns:
        The session's user ID

    Raises:
        AuthenticationError: Missing, unknown or expired token
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing bearer token")

    token = credentials.credentials
    async with db.connection() as conn:
        user_id = await queries.get_session_user_id(conn, token, utc_now())

    if not user_id:
        logger.warning(f"Rejected session token: {token[:6]}...")
        raise AuthenticationError("Unknown or expired session token")

    return user_id
