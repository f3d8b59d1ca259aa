"""
Unit tests for password hashing, JWT tokens, the auth dependency and the user service.
"""

import asyncio
import uuid
from datetime import timedelta

import jwt
import pytest
from fastapi import HTTPException

from todochat.rest import jwt_service
from todochat.rest.auth_middleware import get_current_user, get_current_user_id, _extract_bearer_token
from todochat.rest.jwt_service import create_access_token, decode_and_validate_token
from todochat.rest.password_service import hash_password, verify_password, validate_password
from todochat.rest.user_service import create_user, authenticate_user, get_user_by_id
from todochat.utils.util import utc_now


class TestPasswordService:

    def test_hash_and_verify( self ):
        hashed = hash_password( "correct horse" )

        assert hashed != "correct horse"
        assert hashed.startswith( "$2" )
        assert verify_password( "correct horse", hashed )
        assert not verify_password( "wrong horse", hashed )

    def test_same_password_different_hashes( self ):
        assert hash_password( "password123" ) != hash_password( "password123" )

    def test_empty_password_rejected( self ):
        with pytest.raises( ValueError ):
            hash_password( "" )

    def test_verify_never_raises( self ):
        assert not verify_password( "", "whatever" )
        assert not verify_password( "password123", "" )
        assert not verify_password( "password123", "not-a-bcrypt-hash" )

    def test_validate_password_length( self ):
        assert validate_password( "12345678" ) == ( True, "" )

        is_valid, message = validate_password( "short" )
        assert not is_valid
        assert message == "Password must be at least 8 characters"


class TestJwtService:

    def test_round_trip_claims( self ):
        user_id = str( uuid.uuid4() )
        payload = decode_and_validate_token( create_access_token( user_id, "a@example.com" ) )

        assert payload["sub"] == user_id
        assert payload["email"] == "a@example.com"
        assert "jti" in payload and "iat" in payload
        assert payload["exp"] - payload["iat"] == 7 * 24 * 3600

    def test_tokens_are_unique( self ):
        user_id = str( uuid.uuid4() )
        assert create_access_token( user_id, "a@example.com" ) != create_access_token( user_id, "a@example.com" )

    def test_requires_user_and_email( self ):
        with pytest.raises( ValueError ):
            create_access_token( "", "a@example.com" )
        with pytest.raises( ValueError ):
            create_access_token( str( uuid.uuid4() ), "" )

    def test_expired_token_rejected( self ):
        now = utc_now()
        token = jwt.encode(
            { "sub": str( uuid.uuid4() ), "email": "a@example.com", "iat": now - timedelta( days=8 ), "exp": now - timedelta( days=1 ) },
            jwt_service.SECRET_KEY,
            algorithm="HS256"
        )
        with pytest.raises( jwt.ExpiredSignatureError ):
            decode_and_validate_token( token )

    def test_wrong_signature_rejected( self ):
        token = jwt.encode(
            { "sub": str( uuid.uuid4() ), "email": "a@example.com", "exp": utc_now() + timedelta( days=1 ) },
            "some-other-secret",
            algorithm="HS256"
        )
        with pytest.raises( jwt.InvalidTokenError ):
            decode_and_validate_token( token )

    def test_missing_email_claim_rejected( self ):
        token = jwt.encode(
            { "sub": str( uuid.uuid4() ), "exp": utc_now() + timedelta( days=1 ) },
            jwt_service.SECRET_KEY,
            algorithm="HS256"
        )
        with pytest.raises( jwt.MissingRequiredClaimError ):
            decode_and_validate_token( token )


class TestAuthDependency:

    def test_extract_bearer_token( self ):
        assert _extract_bearer_token( "Bearer abc" ) == "abc"
        assert _extract_bearer_token( "bearer abc" ) == "abc"
        assert _extract_bearer_token( "Basic abc" ) is None
        assert _extract_bearer_token( "Bearer" ) is None
        assert _extract_bearer_token( None ) is None

    def test_valid_token( self ):
        user_id = str( uuid.uuid4() )
        token = create_access_token( user_id, "a@example.com" )

        user = asyncio.run( get_current_user( f"Bearer {token}" ) )
        assert user == { "id": user_id, "email": "a@example.com" }
        assert asyncio.run( get_current_user_id( f"Bearer {token}" ) ) == uuid.UUID( user_id )

    def test_missing_header_is_401( self ):
        with pytest.raises( HTTPException ) as exc_info:
            asyncio.run( get_current_user( None ) )

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Authentication required"

    def test_invalid_token_is_403( self ):
        with pytest.raises( HTTPException ) as exc_info:
            asyncio.run( get_current_user( "Bearer not.a.token" ) )

        assert exc_info.value.status_code == 403
        assert exc_info.value.detail == "Invalid or expired token"

    def test_non_uuid_subject_is_403( self ):
        token = jwt.encode(
            { "sub": "not-a-uuid", "email": "a@example.com", "exp": utc_now() + timedelta( days=1 ) },
            jwt_service.SECRET_KEY,
            algorithm="HS256"
        )
        with pytest.raises( HTTPException ) as exc_info:
            asyncio.run( get_current_user( f"Bearer {token}" ) )

        assert exc_info.value.status_code == 403


class TestUserService:

    def test_create_user( self ):
        success, message, user = create_user( "New.User@Example.com", "password123" )

        assert success, message
        assert user["email"] == "new.user@example.com"
        assert "password_hash" not in user
        uuid.UUID( user["id"] )

    def test_duplicate_email_case_insensitive( self ):
        create_user( "dup@example.com", "password123" )
        success, message, user = create_user( "DUP@example.com", "password456" )

        assert not success
        assert message == "Email already registered"
        assert user is None

    def test_short_password( self ):
        success, message, _ = create_user( "short@example.com", "1234567" )

        assert not success
        assert message == "Password must be at least 8 characters"

    def test_authenticate( self ):
        create_user( "login@example.com", "password123" )

        success, _, user = authenticate_user( "LOGIN@example.com", "password123" )
        assert success
        assert user["email"] == "login@example.com"

    def test_authenticate_failures_share_message( self ):
        create_user( "login@example.com", "password123" )

        wrong_password = authenticate_user( "login@example.com", "wrong-password" )
        unknown_email  = authenticate_user( "nobody@example.com", "password123" )

        assert wrong_password == ( False, "Invalid email or password", None )
        assert unknown_email == ( False, "Invalid email or password", None )

    def test_get_user_by_id( self ):
        _, _, user = create_user( "lookup@example.com", "password123" )

        found = get_user_by_id( user["id"] )
        assert found["email"] == "lookup@example.com"
        assert found["created_at"].tzinfo is not None

        assert get_user_by_id( str( uuid.uuid4() ) ) is None
        assert get_user_by_id( "not-a-uuid" ) is None
