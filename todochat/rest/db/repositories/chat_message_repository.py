"""
Chat message repository: per-user conversation log.
"""

from typing import List
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session
from todochat.rest.postgres_models import ChatMessage, ChatRole
from todochat.rest.db.repositories.base import BaseRepository


class ChatMessageRepository( BaseRepository[ChatMessage] ):

    def __init__( self, session: Session ):
        super().__init__( ChatMessage, session )

    def add_message( self, user_id: uuid.UUID, role: ChatRole, content: str ) -> ChatMessage:
        """Append one turn to the user's conversation."""
        return self.create( user_id=user_id, role=role, content=content )

    def get_history( self, user_id: uuid.UUID, limit: int = 50 ) -> List[ChatMessage]:
        """
        Get the latest messages of a user's conversation.

        Requires:
            - limit is a positive integer

        Ensures:
            - At most limit messages, the most recent ones
            - Returned in chronological order (oldest first)
        """
        stmt = select( ChatMessage ).where(
            ChatMessage.user_id == user_id
        ).order_by(
            ChatMessage.created_at.desc()
        ).limit( limit )

        messages = list( self.session.scalars( stmt ) )
        messages.reverse()

        return messages
