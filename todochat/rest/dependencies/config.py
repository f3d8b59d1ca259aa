"""
Configuration and shared service dependencies for the FastAPI application.

Provides singletons for the configuration manager and the Claude intent
client, plus a per-request chat service bound to that client. Endpoints
receive them through Depends(), so tests can swap them with
app.dependency_overrides.
"""

from fastapi import Depends

from todochat.agents.intent_client import IntentClient
from todochat.config.configuration_manager import ConfigurationManager
from todochat.rest.chat_service import ChatService

# Global instances (initialized once)
_config_mgr    = None
_intent_client = None


def get_config_manager() -> ConfigurationManager:
    """
    Dependency to get configuration manager singleton.

    Ensures:
        - Returns the process-wide ConfigurationManager
        - Block and overrides come from TODOCHAT_CONFIG_MGR_CLI_ARGS
    """
    global _config_mgr
    if _config_mgr is None:
        _config_mgr = ConfigurationManager()
    return _config_mgr


def get_intent_client() -> IntentClient:
    """
    Dependency to get the Claude intent client singleton.

    Ensures:
        - Created on first call, reused afterwards
        - Construction never contacts the API
    """
    global _intent_client
    if _intent_client is None:
        _intent_client = IntentClient()
    return _intent_client


def get_chat_service( intent_client: IntentClient = Depends( get_intent_client ) ) -> ChatService:
    """Chat service bound to the current intent client."""
    return ChatService( intent_client )


async def close_intent_client() -> None:
    """
    Release the intent client's HTTP connections at shutdown.

    Ensures:
        - No-op when the client was never built
        - The next get_intent_client() call builds a fresh client
    """
    global _intent_client
    if _intent_client is not None:
        await _intent_client.close()
        _intent_client = None
