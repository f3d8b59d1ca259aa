"""
Pydantic Models for todo requests, filters and responses.

These are used both by the REST endpoints and by chat actions extracted
from model replies, so enum fields accept any letter case and empty strings
count as "not given".
"""

from datetime import datetime
from typing import Optional
import uuid

from pydantic import Field, field_validator, model_validator

from todochat.config.configuration_manager import ConfigurationManager
from todochat.rest.api_models import CamelModel
from todochat.rest.postgres_models import TodoStatus, TodoPriority
from todochat.utils.util import to_utc

config_mgr = ConfigurationManager()

TITLE_MAX_LENGTH       = config_mgr.get( "todo title max length", default=200, return_type="int" )
DESCRIPTION_MAX_LENGTH = config_mgr.get( "todo description max length", default=1000, return_type="int" )


def _blank_to_none( value ):
    if isinstance( value, str ) and not value.strip():
        return None
    return value


def _upper_enum_value( value ):
    value = _blank_to_none( value )
    if isinstance( value, str ):
        return value.strip().upper()
    return value


class _TodoFieldsBase( CamelModel ):
    """Normalization shared by every todo input model."""

    @field_validator( "status", "priority", mode="before", check_fields=False )
    @classmethod
    def _normalize_enum( cls, value ):
        return _upper_enum_value( value )

    @field_validator( "due_date", "due_before", mode="before", check_fields=False )
    @classmethod
    def _blank_date( cls, value ):
        return _blank_to_none( value )

    @field_validator( "due_date", "due_before", mode="after", check_fields=False )
    @classmethod
    def _date_to_utc( cls, value ):
        return to_utc( value )


class TodoCreate( _TodoFieldsBase ):
    """
    Fields for a new todo.

    Requires:
        - title: 1..200 characters
    """
    title: str = Field( ..., min_length=1, max_length=TITLE_MAX_LENGTH )
    description: Optional[str] = Field( default=None, max_length=DESCRIPTION_MAX_LENGTH )
    due_date: Optional[datetime] = None
    priority: Optional[TodoPriority] = None


class TodoUpdate( _TodoFieldsBase ):
    """
    Partial update; only fields present in the request are applied.
    """
    title: Optional[str] = Field( default=None, min_length=1, max_length=TITLE_MAX_LENGTH )
    description: Optional[str] = Field( default=None, max_length=DESCRIPTION_MAX_LENGTH )
    status: Optional[TodoStatus] = None
    due_date: Optional[datetime] = None
    priority: Optional[TodoPriority] = None

    @model_validator( mode="before" )
    @classmethod
    def _drop_blank_fields( cls, data ):
        # A blank value leaves the field unset, so get_changes() never clears it
        if isinstance( data, dict ):
            return { key: value for key, value in data.items() if not ( isinstance( value, str ) and not value.strip() ) }
        return data

    def get_changes( self ) -> dict:
        """
        Attribute changes to apply, keyed by ORM attribute name.

        Ensures:
            - Only explicitly provided fields are included
            - Blank strings count as not given
            - Explicit nulls clear description and due_date
            - Explicit nulls for title, status and priority are ignored (those columns are required)
        """
        changes = self.model_dump( exclude_unset=True )

        for required in ( "title", "status", "priority" ):
            if required in changes and changes[ required ] is None:
                del changes[ required ]

        return changes


class TodoFilters( _TodoFieldsBase ):
    """Optional filters for listing todos."""
    status: Optional[TodoStatus] = None
    due_before: Optional[datetime] = None
    priority: Optional[TodoPriority] = None


class TodoResponse( CamelModel ):
    """Todo as returned to clients."""
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    description: Optional[str] = None
    status: TodoStatus
    priority: TodoPriority
    due_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @field_validator( "due_date", "created_at", "updated_at", mode="after" )
    @classmethod
    def _as_utc( cls, value ):
        # SQLite hands back naive datetimes; everything is stored in UTC
        return to_utc( value )
