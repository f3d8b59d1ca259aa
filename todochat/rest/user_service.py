"""
User Service for Authentication.

Handles user registration, authentication and lookup operations
using the repository pattern.
"""

import logging
import uuid
from typing import Optional, Dict, Tuple

from sqlalchemy.exc import IntegrityError

from todochat.rest.db.database import get_db
from todochat.rest.db.repositories import UserRepository
from todochat.rest.password_service import hash_password, verify_password, validate_password
from todochat.utils.util import to_utc

logger = logging.getLogger( __name__ )


def _user_to_dict( user ) -> Dict:
    """Public view of a User row (never includes the password hash)."""
    return {
        "id"         : str( user.id ),
        "email"      : user.email,
        "created_at" : to_utc( user.created_at )
    }


def create_user( email: str, password: str ) -> Tuple[bool, str, Optional[Dict]]:
    """
    Create new user account with email and password.

    Requires:
        - email is an email address string (already format-checked by the request model)
        - password is a string

    Ensures:
        - Password is validated for length, then hashed before storage
        - Duplicate emails (case-insensitive) are rejected
        - Returns (success, message, user_dict)

    Raises:
        - None (returns error message in tuple)

    Returns:
        tuple: (success: bool, message: str, user: Optional[Dict])
    """
    if not email or "@" not in email:
        return False, "Invalid email address", None

    is_valid, error_msg = validate_password( password )
    if not is_valid:
        return False, error_msg, None

    password_hash = hash_password( password )

    try:
        with get_db() as session:
            user_repo = UserRepository( session )

            if user_repo.email_exists( email ):
                return False, "Email already registered", None

            user = user_repo.create_user( email=email, password_hash=password_hash )
            user_dict = _user_to_dict( user )

    except IntegrityError:
        # Lost a race with a concurrent registration of the same email
        return False, "Email already registered", None

    logger.info( f"User registered: {user_dict['id']} ({user_dict['email']})" )

    return True, "User created successfully", user_dict


def authenticate_user( email: str, password: str ) -> Tuple[bool, str, Optional[Dict]]:
    """
    Authenticate user with email and password.

    Ensures:
        - Email lookup is case-insensitive
        - Unknown email and wrong password give the same message
        - Returns (success, message, user_dict)

    Raises:
        - None for bad credentials (database errors propagate)

    Returns:
        tuple: (success: bool, message: str, user: Optional[Dict])
    """
    if not email or not password:
        return False, "Invalid email or password", None

    with get_db() as session:
        user = UserRepository( session ).get_by_email( email )

        if not user or not verify_password( password, user.password_hash ):
            return False, "Invalid email or password", None

        user_dict = _user_to_dict( user )

    logger.info( f"User logged in: {user_dict['id']} ({user_dict['email']})" )

    return True, "Authentication successful", user_dict


def get_user_by_id( user_id: str ) -> Optional[Dict]:
    """
    Retrieve user by ID.

    Ensures:
        - Returns user dict, or None if the id is malformed or unknown
        - Password hash is NOT included
    """
    try:
        user_uuid = uuid.UUID( str( user_id ) )
    except ValueError:
        return None

    with get_db() as session:
        user = UserRepository( session ).get_by_id( user_uuid )
        return _user_to_dict( user ) if user else None
