"""
Pydantic Models for the chat endpoints.
"""

from datetime import datetime
from typing import List, Optional, Union
import uuid

from pydantic import Field, field_validator

from todochat.agents.intent_models import IntentType
from todochat.config.configuration_manager import ConfigurationManager
from todochat.rest.api_models import CamelModel
from todochat.rest.postgres_models import ChatRole
from todochat.rest.todo_models import TodoResponse
from todochat.utils.util import to_utc

config_mgr = ConfigurationManager()

MESSAGE_MAX_LENGTH = config_mgr.get( "chat message max length", default=2000, return_type="int" )


class ChatMessageRequest( CamelModel ):
    """
    Chat message from the user.

    Requires:
        - message: 1..2000 characters
    """
    message: str = Field(
        ...,
        min_length  = 1,
        max_length  = MESSAGE_MAX_LENGTH,
        description = "Natural language message",
        examples    = ["Remind me to buy milk tomorrow"]
    )


class ChatMessageResponse( CamelModel ):
    """One stored turn of the conversation."""
    id: uuid.UUID
    role: ChatRole
    content: str
    created_at: datetime

    @field_validator( "created_at", mode="after" )
    @classmethod
    def _as_utc( cls, value ):
        return to_utc( value )


class ChatReplyResponse( CamelModel ):
    """
    Result of one chat exchange.

    Contains:
        - reply: Assistant text shown to the user
        - intent: Intent the model settled on
        - action_result: Created/updated todo, query results, or None
        - todos: The user's full todo list after the action
    """
    reply: str
    intent: IntentType
    action_result: Optional[ Union[ List[TodoResponse], TodoResponse ] ] = None
    todos: List[TodoResponse] = Field( default_factory=list )
