"""
Unit tests for the authentication endpoints.
"""

import uuid
from datetime import timedelta

import jwt

from todochat.rest import jwt_service
from todochat.utils.util import utc_now


class TestRegister:

    def test_register_returns_token_and_user( self, client ):
        response = client.post( "/api/auth/register", json={ "email": "Alice@Example.com", "password": "password123" } )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["user"]["email"] == "alice@example.com"
        uuid.UUID( body["data"]["user"]["id"] )

        payload = jwt_service.decode_and_validate_token( body["data"]["token"] )
        assert payload["sub"] == body["data"]["user"]["id"]

    def test_duplicate_email( self, client, register_user ):
        register_user( email="alice@example.com" )

        response = client.post( "/api/auth/register", json={ "email": "ALICE@example.com", "password": "password123" } )

        assert response.status_code == 400
        assert response.json() == { "success": False, "error": "Email already registered" }

    def test_short_password_is_validation_error( self, client ):
        response = client.post( "/api/auth/register", json={ "email": "a@example.com", "password": "short" } )

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Validation failed"
        assert body["details"][0]["field"] == "password"

    def test_bad_email_is_validation_error( self, client ):
        response = client.post( "/api/auth/register", json={ "email": "not-an-email", "password": "password123" } )

        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"


class TestLogin:

    def test_login( self, client, register_user ):
        registered = register_user( email="alice@example.com", password="password123" )

        response = client.post( "/api/auth/login", json={ "email": "alice@example.com", "password": "password123" } )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"] == registered["user"]
        assert data["token"]

    def test_wrong_password( self, client, register_user ):
        register_user( email="alice@example.com", password="password123" )

        response = client.post( "/api/auth/login", json={ "email": "alice@example.com", "password": "wrong-password" } )

        assert response.status_code == 401
        assert response.json() == { "success": False, "error": "Invalid email or password" }

    def test_unknown_email( self, client ):
        response = client.post( "/api/auth/login", json={ "email": "nobody@example.com", "password": "password123" } )

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid email or password"


class TestMe:

    def test_me( self, client, register_user ):
        registered = register_user( email="alice@example.com" )

        response = client.get( "/api/auth/me", headers={ "Authorization": f"Bearer {registered['token']}" } )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == registered["user"]["id"]
        assert data["email"] == "alice@example.com"
        assert "createdAt" in data
        assert "passwordHash" not in data

    def test_me_without_token( self, client ):
        response = client.get( "/api/auth/me" )

        assert response.status_code == 401
        assert response.json() == { "success": False, "error": "Authentication required" }

    def test_me_with_invalid_token( self, client ):
        response = client.get( "/api/auth/me", headers={ "Authorization": "Bearer garbage" } )

        assert response.status_code == 403
        assert response.json()["error"] == "Invalid or expired token"

    def test_me_for_deleted_user( self, client ):
        now = utc_now()
        token = jwt.encode(
            { "sub": str( uuid.uuid4() ), "email": "ghost@example.com", "iat": now, "exp": now + timedelta( days=1 ) },
            jwt_service.SECRET_KEY,
            algorithm="HS256"
        )

        response = client.get( "/api/auth/me", headers={ "Authorization": f"Bearer {token}" } )

        assert response.status_code == 404
        assert response.json()["error"] == "User not found"
