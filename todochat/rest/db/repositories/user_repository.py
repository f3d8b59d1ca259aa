"""
User repository for CRUD operations on User model.
"""

from typing import Optional

from sqlalchemy import select, exists
from sqlalchemy.orm import Session
from todochat.rest.postgres_models import User
from todochat.rest.db.repositories.base import BaseRepository


class UserRepository( BaseRepository[User] ):
    """
    Repository for User model with authentication-specific lookups.

    Extends BaseRepository with:
        - Case-insensitive email lookup
        - Email existence check
        - User creation with normalized email
    """

    def __init__( self, session: Session ):
        super().__init__( User, session )

    def get_by_email( self, email: str ) -> Optional[User]:
        """
        Get user by email address.

        Ensures:
            - Case-insensitive (emails are stored lower-case)
            - Returns None if not found
        """
        stmt = select( User ).where( User.email == email.strip().lower() )
        return self.session.scalars( stmt ).first()

    def create_user( self, email: str, password_hash: str ) -> User:
        """
        Create new user with email and password hash.

        Requires:
            - password_hash: Bcrypt password hash

        Ensures:
            - Email stored trimmed and lower-case

        Raises:
            IntegrityError: If email already exists
        """
        return self.create(
            email         = email.strip().lower(),
            password_hash = password_hash
        )

    def email_exists( self, email: str ) -> bool:
        """True if the (case-insensitive) email is already registered."""
        stmt = select( exists().where( User.email == email.strip().lower() ) )
        return bool( self.session.scalar( stmt ) )
