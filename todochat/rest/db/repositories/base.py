"""
Base repository with the CRUD operations shared by every model.

Repositories wrap a caller-owned session and never commit; get_db() does.
"""

from typing import TypeVar, Generic, Optional, Type, Any
from sqlalchemy.orm import Session
from todochat.rest.postgres_models import Base

ModelType = TypeVar( "ModelType", bound=Base )


class BaseRepository( Generic[ModelType] ):
    """
    Generic repository over one SQLAlchemy model.

    Requires:
        - model: SQLAlchemy model class with an `id` primary key
        - session: Active SQLAlchemy session

    Ensures:
        - Type-safe results via Python generics
        - flush() after writes so generated defaults are populated
        - No commit/rollback (caller's get_db() handles the transaction)

    Example:
        with get_db() as session:
            todo_repo = BaseRepository[Todo]( Todo, session )
            todo = todo_repo.get_by_id( todo_id )
    """

    def __init__( self, model: Type[ModelType], session: Session ):
        self.model   = model
        self.session = session

    def get_by_id( self, id: Any ) -> Optional[ModelType]:
        """
        Get entity by primary key.

        Ensures:
            - Returns None if not found, never raises for a missing row
        """
        return self.session.get( self.model, id )

    def create( self, **kwargs ) -> ModelType:
        """
        Create new entity.

        Ensures:
            - Entity added to session and flushed, so id and defaults are set
            - Commit NOT called

        Raises:
            SQLAlchemy exceptions for constraint violations
        """
        entity = self.model( **kwargs )
        self.session.add( entity )
        self.session.flush()
        return entity

    def update_entity( self, entity: ModelType, **kwargs ) -> ModelType:
        """
        Apply attribute changes to an already loaded entity.

        Requires:
            - entity belongs to self.session
            - every key in kwargs is a mapped attribute of the model

        Raises:
            AttributeError if a key is not an attribute of the model
        """
        for key, value in kwargs.items():
            if not hasattr( entity, key ):
                raise AttributeError( f"{self.model.__name__} has no attribute [{key}]" )
            setattr( entity, key, value )

        self.session.flush()
        return entity

    def delete_entity( self, entity: ModelType ) -> None:
        """Delete an already loaded entity."""
        self.session.delete( entity )
        self.session.flush()
