"""
Password Security Service.

Handles password hashing, verification, and length validation
using Passlib with bcrypt.
"""

from passlib.context import CryptContext
from typing import Tuple

from todochat.config.configuration_manager import ConfigurationManager

config_mgr = ConfigurationManager()

MIN_PASSWORD_LENGTH = config_mgr.get( "password min length", default=8, return_type="int" )

pwd_context = CryptContext(
    schemes        = ["bcrypt"],
    deprecated     = "auto",
    bcrypt__rounds = config_mgr.get( "password bcrypt rounds", default=12, return_type="int" )
)


def hash_password( plain_password: str ) -> str:
    """
    Hash plaintext password using bcrypt.

    Requires:
        - plain_password is a non-empty string

    Ensures:
        - Returns bcrypt hash string (60 characters) with a random salt
        - Same password produces different hashes

    Raises:
        - ValueError if password is empty

    Returns:
        str: Bcrypt hash of password
    """
    if not plain_password:
        raise ValueError( "Password cannot be empty" )

    return pwd_context.hash( plain_password )


def verify_password( plain_password: str, hashed_password: str ) -> bool:
    """
    Verify plaintext password against stored hash.

    Ensures:
        - Returns True only if password matches hash
        - Constant-time comparison
        - Never raises (malformed hashes verify as False)

    Returns:
        bool: True if password matches, False otherwise
    """
    if not plain_password or not hashed_password:
        return False

    try:
        return pwd_context.verify( plain_password, hashed_password )
    except ( ValueError, TypeError ):
        return False


def validate_password( password: str ) -> Tuple[bool, str]:
    """
    Validate password meets the minimum length.

    Ensures:
        - Returns (True, "") if acceptable
        - Returns (False, "error message") otherwise
        - Never raises

    Returns:
        tuple: (is_valid: bool, error_message: str)
    """
    if not password or len( password ) < MIN_PASSWORD_LENGTH:
        return False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters"

    return True, ""


def quick_smoke_test():
    """
    Quick smoke test for password service.

    Ensures:
        - Tests hashing, verification and length validation
        - Returns True if all tests pass
    """
    import todochat.utils.util as du

    du.print_banner( "Password Service Smoke Test", prepend_nl=True )

    password = "TestPass123!"
    hash1 = hash_password( password )
    hash2 = hash_password( password )

    if hash1 == hash2:
        print( "✗ Hashes should differ (random salt)" )
        return False
    print( "✓ Password hashing working (random salts)" )

    if not verify_password( password, hash1 ) or verify_password( "WrongPassword", hash1 ):
        print( "✗ Password verification failed" )
        return False
    print( "✓ Password verification working" )

    if validate_password( "short" )[ 0 ] or not validate_password( "long enough" )[ 0 ]:
        print( "✗ Length validation failed" )
        return False
    print( "✓ Length validation working" )

    print( "\n✓ All password service tests passed!" )
    return True


if __name__ == "__main__":
    quick_smoke_test()
