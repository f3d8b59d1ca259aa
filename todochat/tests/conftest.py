"""
Shared pytest fixtures.

The environment is set before any todochat module is imported: the testing
configuration block points the engine at an in-memory SQLite database, and
the JWT key must exist when jwt_service is first imported.
"""

import os

os.environ[ "TODOCHAT_CONFIG_MGR_CLI_ARGS" ] = "config_block_id=testing"
os.environ[ "JWT_SECRET_KEY" ] = "unit-test-secret-key-not-for-production"
os.environ.pop( "DATABASE_URL", None )

from unittest.mock import Mock, AsyncMock

import pytest
from fastapi.testclient import TestClient

from todochat.agents.intent_models import ChatIntent
from todochat.rest.db.database import init_db, drop_db


@pytest.fixture( autouse=True )
def fresh_database():
    """Every test starts from empty tables."""
    drop_db()
    init_db()
    yield


@pytest.fixture
def app():
    from todochat.rest.main import app as fastapi_app

    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client( app ):
    with TestClient( app ) as test_client:
        yield test_client


@pytest.fixture
def mock_intent_client( app ):
    """Replace the Claude client with a mock whose reply defaults to plain chat."""
    from todochat.rest.dependencies.config import get_intent_client

    intent_client = Mock()
    intent_client.process_user_message = AsyncMock( return_value=ChatIntent.chat_fallback( "Hello!" ) )
    intent_client.test_connection = AsyncMock( return_value=True )

    app.dependency_overrides[ get_intent_client ] = lambda: intent_client
    return intent_client


def register( client, email="alice@example.com", password="password123" ) -> dict:
    """Register a user through the API and return the response payload."""
    response = client.post( "/api/auth/register", json={ "email": email, "password": password } )
    assert response.status_code == 201, response.text
    return response.json()[ "data" ]


@pytest.fixture
def register_user( client ):
    def _register( email="alice@example.com", password="password123" ) -> dict:
        return register( client, email=email, password=password )
    return _register


@pytest.fixture
def auth_headers( client ) -> dict:
    payload = register( client )
    return { "Authorization": f"Bearer {payload['token']}" }


@pytest.fixture
def other_auth_headers( client ) -> dict:
    payload = register( client, email="bob@example.com" )
    return { "Authorization": f"Bearer {payload['token']}" }
