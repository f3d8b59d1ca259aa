#!/usr/bin/env python3
"""
Pydantic models for the chat intent contract.

The model is asked to answer with a JSON object of this shape:

    {
        "intent" : "CREATE" | "UPDATE" | "DELETE" | "QUERY" | "CHAT",
        "action" : {
            "type"    : "create" | "update" | "delete" | "query",
            "todoId"  : "<uuid of an existing todo>",
            "data"    : { "title", "description", "dueDate", "priority", "status" },
            "filters" : { "status", "dueBefore", "priority" }
        },
        "reply"  : "Natural language response to the user"
    }

Everything coming back from the model is validated here before any todo is
touched.
"""

import enum
from typing import ClassVar, Dict, Literal, Optional

from pydantic import Field, field_validator

from todochat.rest.api_models import CamelModel
from todochat.rest.todo_models import TodoUpdate, TodoFilters


class IntentType( str, enum.Enum ):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    QUERY  = "QUERY"
    CHAT   = "CHAT"


class TodoAction( CamelModel ):
    """
    Todo mutation or query requested by the model.

    Fields:
        type: create, update, delete or query
        todo_id: Target todo for update/delete (wire name todoId)
        data: Field values for create/update
        filters: Conditions for query
    """
    type: Literal[ "create", "update", "delete", "query" ]
    todo_id: Optional[str] = None
    data: Optional[TodoUpdate] = None
    filters: Optional[TodoFilters] = None

    @field_validator( "type", mode="before" )
    @classmethod
    def _lowercase_type( cls, value ):
        if isinstance( value, str ):
            return value.strip().lower()
        return value

    @field_validator( "todo_id", mode="before" )
    @classmethod
    def _blank_todo_id( cls, value ):
        if isinstance( value, str ) and not value.strip():
            return None
        return value


class ChatIntent( CamelModel ):
    """
    Validated intent/action/reply triple.

    Requires:
        - intent: one of IntentType
        - reply: non-empty text shown to the user
    """
    intent: IntentType
    action: Optional[TodoAction] = None
    reply: str = Field( ..., min_length=1 )

    # Action type each intent is allowed to carry (CHAT carries none)
    ACTION_FOR_INTENT: ClassVar[ Dict[ IntentType, str ] ] = {
        IntentType.CREATE : "create",
        IntentType.UPDATE : "update",
        IntentType.DELETE : "delete",
        IntentType.QUERY  : "query",
    }

    @field_validator( "intent", mode="before" )
    @classmethod
    def _uppercase_intent( cls, value ):
        if isinstance( value, str ):
            return value.strip().upper()
        return value

    def action_matches_intent( self, action: Optional[TodoAction]=None ) -> bool:
        """
        Check that an action is consistent with this intent.

        Ensures:
            - False for any action riding on a CHAT intent
            - False when action.type differs from the intent's action type
            - True when there is no action
        """
        action = action if action is not None else self.action
        if action is None:
            return True

        return self.ACTION_FOR_INTENT.get( self.intent ) == action.type

    @classmethod
    def chat_fallback( cls, reply: str ) -> "ChatIntent":
        """Plain CHAT intent with no action."""
        return cls( intent=IntentType.CHAT, reply=reply )
