"""
Authentication Middleware for FastAPI.

Provides the dependency that protects todo and chat routes:
- Bearer token extraction from the Authorization header
- JWT validation
- User information extraction
"""

import logging
import uuid
from typing import Optional, Dict

import jwt
from fastapi import HTTPException, status, Header

from todochat.rest.jwt_service import decode_and_validate_token

logger = logging.getLogger( __name__ )


def _extract_bearer_token( authorization: Optional[str] ) -> Optional[str]:
    """Return the token from "Bearer <token>", or None if the header is absent or malformed."""
    if not authorization:
        return None

    parts = authorization.split()
    if len( parts ) != 2 or parts[0].lower() != "bearer":
        return None

    return parts[1]


async def get_current_user( authorization: Optional[str] = Header( None ) ) -> Dict:
    """
    Get current user from Authorization header (required).

    Requires:
        - Authorization header format: "Bearer <token>"

    Ensures:
        - Returns {"id": <uuid str>, "email": <str>} for a valid token
        - Raises 401 when no usable bearer token is present
        - Raises 403 when the token is invalid or expired

    Raises:
        - HTTPException 401 if header missing or malformed
        - HTTPException 403 if token validation fails

    Example:
        @router.get("/protected")
        async def endpoint(user: Dict = Depends(get_current_user)):
            return {"message": f"Hello {user['email']}"}
    """
    token = _extract_bearer_token( authorization )

    if not token:
        raise HTTPException(
            status_code = status.HTTP_401_UNAUTHORIZED,
            detail      = "Authentication required",
            headers     = {"WWW-Authenticate": "Bearer"}
        )

    try:
        payload = decode_and_validate_token( token )
        user_id = str( uuid.UUID( payload["sub"] ) )
    except ( jwt.InvalidTokenError, ValueError, KeyError ) as e:
        logger.warning( f"Invalid token: {e}" )
        raise HTTPException(
            status_code = status.HTTP_403_FORBIDDEN,
            detail      = "Invalid or expired token"
        )

    return {
        "id"    : user_id,
        "email" : payload["email"]
    }


async def get_current_user_id( authorization: Optional[str] = Header( None ) ) -> uuid.UUID:
    """
    Dependency returning just the authenticated user's UUID.

    Ensures:
        - Same validation and errors as get_current_user
    """
    user = await get_current_user( authorization )
    return uuid.UUID( user["id"] )
