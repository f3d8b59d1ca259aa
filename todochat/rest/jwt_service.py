"""
JWT Token Service.

This module provides JWT access token generation and validation
using PyJWT library with HS256 algorithm.

Responsibilities:
- Generate access tokens (7 days by default)
- Validate token signatures and expiration
- Decode token claims
"""

import logging
import os
import uuid
from datetime import timedelta
from typing import Dict

import jwt

from todochat.config.configuration_manager import ConfigurationManager
from todochat.utils.util import utc_now

logger = logging.getLogger( __name__ )

config_mgr = ConfigurationManager()

SECRET_KEY = os.getenv( "JWT_SECRET_KEY" )
if not SECRET_KEY:
    if os.getenv( "ENVIRONMENT" ) == "production":
        raise ValueError( "JWT_SECRET_KEY environment variable must be set in production!" )
    else:
        logger.warning( "Using default development JWT secret key, set JWT_SECRET_KEY for production" )
        SECRET_KEY = "dev-secret-key-DO-NOT-USE-IN-PRODUCTION-4q9zt1"

ALGORITHM                 = config_mgr.get( "jwt algorithm", default="HS256" )
ACCESS_TOKEN_EXPIRE_DAYS  = config_mgr.get( "jwt access token expire days", default=7, return_type="int" )


def create_access_token( user_id: str, email: str ) -> str:
    """
    Generate a signed JWT access token.

    Requires:
        - user_id is a non-empty user UUID string
        - email is a non-empty email address string

    Ensures:
        - Token includes sub, email, iat, exp, jti claims
        - Token is valid for ACCESS_TOKEN_EXPIRE_DAYS

    Raises:
        - ValueError if user_id or email is empty

    Returns:
        str: Encoded JWT token
    """
    if not user_id or not email:
        raise ValueError( "user_id and email are required" )

    now = utc_now()

    payload = {
        "sub"   : str( user_id ),
        "email" : email,
        "iat"   : now,
        "exp"   : now + timedelta( days=ACCESS_TOKEN_EXPIRE_DAYS ),
        "jti"   : str( uuid.uuid4() )
    }

    return jwt.encode( payload, SECRET_KEY, algorithm=ALGORITHM )


def decode_and_validate_token( token: str ) -> Dict:
    """
    Decode and validate JWT token.

    Requires:
        - token is a non-empty JWT string

    Ensures:
        - Signature and expiration are verified
        - sub and email claims are present

    Raises:
        - jwt.ExpiredSignatureError if token expired
        - jwt.InvalidTokenError if signature invalid or claims missing

    Returns:
        dict: Decoded token payload
    """
    return jwt.decode(
        token,
        SECRET_KEY,
        algorithms = [ALGORITHM],
        options    = { "require": [ "sub", "email", "exp" ] }
    )


def quick_smoke_test():
    """
    Quick smoke test for JWT service functionality.

    Ensures:
        - Tests token generation, validation and invalid token rejection
        - Returns True if all tests pass
    """
    import todochat.utils.util as du

    du.print_banner( "JWT Service Smoke Test", prepend_nl=True )

    token = create_access_token( user_id=str( uuid.uuid4() ), email="test@example.com" )
    payload = decode_and_validate_token( token )
    if payload[ "email" ] != "test@example.com":
        print( "✗ Access token validation failed" )
        return False
    print( "✓ Access token validated correctly" )

    try:
        decode_and_validate_token( "invalid.token.string" )
        print( "✗ Invalid token was accepted (security issue!)" )
        return False
    except jwt.InvalidTokenError:
        print( "✓ Invalid token rejected correctly" )

    print( "\n✓ All JWT service tests passed!" )
    return True


if __name__ == "__main__":
    quick_smoke_test()
