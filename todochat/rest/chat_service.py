"""
Chat Service.

Runs one chat exchange end to end:

    user message ──► store USER turn ──► recent todos ──► IntentClient
                                                              │
    ChatReplyResponse ◄── store ASSISTANT turn ◄── execute action (own transaction)

The model call happens outside any database transaction. A failing action
is logged and reported as actionResult = None; the reply still goes out.
"""

import logging
import uuid
from typing import List, Optional, Union

from todochat.agents.intent_client import IntentClient
from todochat.config.configuration_manager import ConfigurationManager
from todochat.rest.chat_models import ChatMessageResponse, ChatReplyResponse
from todochat.rest.db.database import get_db
from todochat.rest.db.repositories import ChatMessageRepository
from todochat.rest.exceptions import TodoChatError
from todochat.rest.postgres_models import ChatRole
from todochat.rest.todo_models import TodoResponse
from todochat.rest.todo_service import TodoService

logger = logging.getLogger( __name__ )


def _to_response( result ) -> Union[TodoResponse, List[TodoResponse], None]:
    if result is None:
        return None
    if isinstance( result, list ):
        return [ TodoResponse.model_validate( todo ) for todo in result ]
    return TodoResponse.model_validate( result )


class ChatService:
    """
    Chat pipeline for a single user message.

    Requires:
        - intent_client: IntentClient (or anything with an async process_user_message)
    """

    def __init__( self, intent_client: IntentClient, context_limit: Optional[int] = None ):
        config_mgr = ConfigurationManager()

        self.intent_client = intent_client
        self.context_limit = context_limit or config_mgr.get( "llm context todo limit", default=20, return_type="int" )

    async def handle_message( self, user_id: uuid.UUID, message: str ) -> ChatReplyResponse:
        """
        Process a chat message and apply any todo action it implies.

        Ensures:
            - USER and ASSISTANT turns are both stored
            - A validated action runs in its own transaction
            - Action failures are logged and give action_result None
            - todos is the user's full list after the action

        Raises:
            - Database errors while storing messages or listing todos
        """
        with get_db() as session:
            ChatMessageRepository( session ).add_message( user_id, ChatRole.USER, message )
            recent_todos = TodoService( session ).get_recent_todos( user_id, limit=self.context_limit )

        intent = await self.intent_client.process_user_message( user_id, message, recent_todos )

        action_result = None
        if intent.action is not None:
            action_result = self._execute_action( user_id, intent.action )

        with get_db() as session:
            ChatMessageRepository( session ).add_message( user_id, ChatRole.ASSISTANT, intent.reply )
            todos = [ TodoResponse.model_validate( todo ) for todo in TodoService( session ).get_todos( user_id ) ]

        return ChatReplyResponse(
            reply         = intent.reply,
            intent        = intent.intent,
            action_result = action_result,
            todos         = todos
        )

    def _execute_action( self, user_id: uuid.UUID, action ) -> Union[TodoResponse, List[TodoResponse], None]:
        """Run the action in one transaction; on failure roll back and return None."""
        try:
            with get_db() as session:
                result = TodoService( session ).execute_action( user_id, action )
                return _to_response( result )

        except TodoChatError as e:
            logger.error( f"Chat action [{action.type}] failed for user {user_id}: {e}" )
        except Exception as e:
            logger.exception( f"Unexpected error executing chat action [{action.type}] for user {user_id}: {e}" )

        return None

    def get_history( self, user_id: uuid.UUID, limit: int = 50 ) -> List[ChatMessageResponse]:
        """
        Latest messages of the user's conversation, oldest first.
        """
        with get_db() as session:
            messages = ChatMessageRepository( session ).get_history( user_id, limit=limit )
            return [ ChatMessageResponse.model_validate( msg ) for msg in messages ]
