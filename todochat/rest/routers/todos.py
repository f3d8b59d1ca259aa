"""
Todo Router for FastAPI.

CRUD endpoints over the authenticated user's todos. All routes require a
bearer token; a todo owned by someone else answers exactly like a missing one.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from todochat.rest.api_models import ApiResponse
from todochat.rest.auth_middleware import get_current_user_id
from todochat.rest.db.database import get_db
from todochat.rest.todo_models import TodoCreate, TodoUpdate, TodoFilters, TodoResponse
from todochat.rest.todo_service import TodoService

router = APIRouter(
    prefix = "/api/todos",
    tags   = ["Todos"]
)


@router.get( "", response_model=ApiResponse[List[TodoResponse]] )
async def list_todos(
    status_filter: Optional[str] = Query( None, alias="status", description="PENDING or COMPLETED" ),
    due_before: Optional[str] = Query( None, alias="dueBefore", description="ISO8601 datetime" ),
    priority: Optional[str] = Query( None, description="LOW, MEDIUM or HIGH" ),
    user_id: uuid.UUID = Depends( get_current_user_id )
) -> ApiResponse[List[TodoResponse]]:
    """
    List the user's todos, optionally filtered.

    Ensures:
        - Pending first, then earliest due date, then newest
        - Bad filter values answer 400 like any other validation failure
    """
    try:
        filters = TodoFilters( status=status_filter, due_before=due_before, priority=priority )
    except ValidationError as e:
        raise RequestValidationError( e.errors() )

    with get_db() as session:
        todos = TodoService( session ).get_todos( user_id, filters )
        data  = [ TodoResponse.model_validate( todo ) for todo in todos ]

    return ApiResponse[List[TodoResponse]]( data=data )


@router.post( "", response_model=ApiResponse[TodoResponse], status_code=status.HTTP_201_CREATED )
async def create_todo(
    request: TodoCreate,
    user_id: uuid.UUID = Depends( get_current_user_id )
) -> ApiResponse[TodoResponse]:
    """Create a todo for the authenticated user."""
    with get_db() as session:
        todo = TodoService( session ).create_todo( user_id, request )
        data = TodoResponse.model_validate( todo )

    return ApiResponse[TodoResponse]( data=data )


@router.patch( "/{todo_id}", response_model=ApiResponse[TodoResponse] )
async def update_todo(
    todo_id: str,
    request: TodoUpdate,
    user_id: uuid.UUID = Depends( get_current_user_id )
) -> ApiResponse[TodoResponse]:
    """
    Partially update one of the user's todos.

    Raises:
        - TodoNotFoundError (404) when the todo is missing or not the user's
    """
    with get_db() as session:
        todo = TodoService( session ).update_todo( user_id, todo_id, request )
        data = TodoResponse.model_validate( todo )

    return ApiResponse[TodoResponse]( data=data )


@router.delete( "/{todo_id}", response_model=ApiResponse )
async def delete_todo(
    todo_id: str,
    user_id: uuid.UUID = Depends( get_current_user_id )
) -> ApiResponse:
    """
    Delete one of the user's todos.

    Raises:
        - TodoNotFoundError (404) when the todo is missing or not the user's
    """
    with get_db() as session:
        TodoService( session ).delete_todo( user_id, todo_id )

    return ApiResponse( message="Todo deleted successfully" )
