"""
Todo Service.

Owner-scoped todo operations on top of TodoRepository, plus the dispatcher
that turns a validated chat action into one of those operations.

Usage:
    with get_db() as session:
        todo = TodoService( session ).create_todo( user_id, TodoCreate( title="Buy milk" ) )
"""

import logging
import uuid
from typing import List, Optional, Union

from pydantic import ValidationError
from sqlalchemy.orm import Session

from todochat.rest.db.repositories import TodoRepository
from todochat.rest.exceptions import TodoNotFoundError, InvalidActionError
from todochat.rest.postgres_models import Todo, TodoPriority
from todochat.rest.todo_models import TodoCreate, TodoUpdate, TodoFilters

logger = logging.getLogger( __name__ )


def _parse_todo_id( todo_id: Union[str, uuid.UUID], user_id: uuid.UUID ) -> uuid.UUID:
    """Malformed ids can't name an existing todo, so they are reported as not found."""
    if isinstance( todo_id, uuid.UUID ):
        return todo_id
    try:
        return uuid.UUID( str( todo_id ) )
    except ValueError:
        raise TodoNotFoundError( todo_id, user_id )


class TodoService:
    """
    Todo operations scoped to a single user.

    Requires:
        - session: Active SQLAlchemy session from get_db()

    Ensures:
        - A todo owned by another user behaves exactly like a missing one
        - No commit is issued here; the caller's session decides
    """

    def __init__( self, session: Session ):
        self.session   = session
        self.todo_repo = TodoRepository( session )

    def create_todo( self, user_id: uuid.UUID, todo_input: TodoCreate ) -> Todo:
        """
        Create a todo for user_id.

        Ensures:
            - priority defaults to MEDIUM, status to PENDING
        """
        todo = self.todo_repo.create(
            user_id     = user_id,
            title       = todo_input.title,
            description = todo_input.description,
            due_date    = todo_input.due_date,
            priority    = todo_input.priority or TodoPriority.MEDIUM
        )

        logger.info( f"Todo created: {todo.id} for user {user_id}" )
        return todo

    def get_todo( self, user_id: uuid.UUID, todo_id: Union[str, uuid.UUID] ) -> Todo:
        """
        Get one of the user's todos.

        Raises:
            - TodoNotFoundError if missing or not owned by user_id
        """
        todo_uuid = _parse_todo_id( todo_id, user_id )
        todo = self.todo_repo.get_for_user( todo_uuid, user_id )

        if todo is None:
            raise TodoNotFoundError( str( todo_id ), user_id )

        return todo

    def update_todo( self, user_id: uuid.UUID, todo_id: Union[str, uuid.UUID], todo_input: TodoUpdate ) -> Todo:
        """
        Apply a partial update to one of the user's todos.

        Ensures:
            - Ownership verified before any change
            - Only explicitly provided fields change

        Raises:
            - TodoNotFoundError if missing or not owned by user_id
        """
        todo = self.get_todo( user_id, todo_id )
        self.todo_repo.update_entity( todo, **todo_input.get_changes() )

        logger.info( f"Todo updated: {todo.id} for user {user_id}" )
        return todo

    def delete_todo( self, user_id: uuid.UUID, todo_id: Union[str, uuid.UUID] ) -> None:
        """
        Delete one of the user's todos.

        Raises:
            - TodoNotFoundError if missing or not owned by user_id
        """
        todo = self.get_todo( user_id, todo_id )
        self.todo_repo.delete_entity( todo )

        logger.info( f"Todo deleted: {todo_id} for user {user_id}" )

    def get_todos( self, user_id: uuid.UUID, filters: Optional[TodoFilters] = None ) -> List[Todo]:
        """
        List the user's todos, optionally filtered.

        Ensures:
            - PENDING before COMPLETED, earliest due date first, newest first
        """
        filters = filters or TodoFilters()

        return self.todo_repo.list_for_user(
            user_id,
            status     = filters.status,
            due_before = filters.due_before,
            priority   = filters.priority
        )

    def get_recent_todos( self, user_id: uuid.UUID, limit: int = 20 ) -> List[Todo]:
        """The user's newest todos, used as context for the chat model."""
        return self.todo_repo.recent_for_user( user_id, limit=limit )

    def execute_action( self, user_id: uuid.UUID, action ) -> Union[Todo, List[Todo], None]:
        """
        Route a validated TodoAction to the matching operation.

        Requires:
            - action is a todochat.agents.intent_models.TodoAction

        Ensures:
            - create → created Todo
            - update → updated Todo
            - delete → None
            - query  → filtered list of Todo

        Raises:
            - InvalidActionError if the action lacks what its type needs
            - TodoNotFoundError if the referenced todo isn't the user's
        """
        action_type = action.type

        if action_type == "create":
            if action.data is None:
                raise InvalidActionError( "Create action requires data", action_type )
            try:
                todo_input = TodoCreate.model_validate( action.data.model_dump( exclude_none=True ) )
            except ValidationError as e:
                raise InvalidActionError( f"Create action data is invalid: {e.errors()[0]['msg']}", action_type )
            return self.create_todo( user_id, todo_input )

        elif action_type == "update":
            if not action.todo_id or action.data is None:
                raise InvalidActionError( "Update action requires todoId and data", action_type )
            return self.update_todo( user_id, action.todo_id, action.data )

        elif action_type == "delete":
            if not action.todo_id:
                raise InvalidActionError( "Delete action requires todoId", action_type )
            self.delete_todo( user_id, action.todo_id )
            return None

        elif action_type == "query":
            return self.get_todos( user_id, action.filters )

        else:
            raise InvalidActionError( f"Unknown action type: {action_type}", action_type )
