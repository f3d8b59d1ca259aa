"""
Todo repository: owner-scoped queries over the Todo model.
"""

from datetime import datetime
from typing import Optional, List
import uuid

from sqlalchemy import select, case
from sqlalchemy.orm import Session
from todochat.rest.postgres_models import Todo, TodoStatus, TodoPriority
from todochat.rest.db.repositories.base import BaseRepository


class TodoRepository( BaseRepository[Todo] ):
    """
    Repository for Todo model.

    Every lookup takes the owning user_id, so a todo belonging to someone
    else is indistinguishable from a missing one.
    """

    def __init__( self, session: Session ):
        super().__init__( Todo, session )

    def get_for_user( self, todo_id: uuid.UUID, user_id: uuid.UUID ) -> Optional[Todo]:
        """
        Get a todo only if it belongs to user_id.

        Ensures:
            - Returns None if missing or owned by another user
        """
        stmt = select( Todo ).where( Todo.id == todo_id, Todo.user_id == user_id )
        return self.session.scalars( stmt ).first()

    def list_for_user(
        self,
        user_id: uuid.UUID,
        status: Optional[TodoStatus] = None,
        due_before: Optional[datetime] = None,
        priority: Optional[TodoPriority] = None
    ) -> List[Todo]:
        """
        List a user's todos with optional filters.

        Requires:
            - due_before, when given, is an aware UTC datetime

        Ensures:
            - status / priority filter by equality
            - due_before keeps todos with due_date <= due_before (undated todos excluded)
            - Order: PENDING first, then earliest due date (undated last), then newest first
        """
        stmt = select( Todo ).where( Todo.user_id == user_id )

        if status is not None:
            stmt = stmt.where( Todo.status == status )

        if due_before is not None:
            stmt = stmt.where( Todo.due_date.is_not( None ), Todo.due_date <= due_before )

        if priority is not None:
            stmt = stmt.where( Todo.priority == priority )

        stmt = stmt.order_by(
            case( ( Todo.status == TodoStatus.PENDING, 0 ), else_=1 ),
            case( ( Todo.due_date.is_( None ), 1 ), else_=0 ),
            Todo.due_date.asc(),
            Todo.created_at.desc()
        )

        return list( self.session.scalars( stmt ) )

    def recent_for_user( self, user_id: uuid.UUID, limit: int = 20 ) -> List[Todo]:
        """Newest todos first, at most limit of them."""
        stmt = select( Todo ).where(
            Todo.user_id == user_id
        ).order_by(
            Todo.created_at.desc()
        ).limit( limit )

        return list( self.session.scalars( stmt ) )
