"""
SQLAlchemy ORM Models for the todochat database.

Uses SQLAlchemy 2.0 declarative syntax. Column types are the portable
generic ones (Uuid, Enum, DateTime with timezone) so the same models run on
PostgreSQL in deployment and SQLite in tests.
"""

from sqlalchemy import (
    String,
    DateTime,
    ForeignKey,
    Text,
    Index,
    Uuid,
    Enum as SqlEnum,
    func
)
from sqlalchemy.orm import DeclarativeBase, relationship, Mapped, mapped_column
from datetime import datetime
from typing import Optional, List
import enum
import uuid

from todochat.utils.util import utc_now


class TodoStatus( str, enum.Enum ):
    PENDING   = "PENDING"
    COMPLETED = "COMPLETED"


class TodoPriority( str, enum.Enum ):
    LOW    = "LOW"
    MEDIUM = "MEDIUM"
    HIGH   = "HIGH"


class ChatRole( str, enum.Enum ):
    USER      = "USER"
    ASSISTANT = "ASSISTANT"


class Base( DeclarativeBase ):
    """Base class for all ORM models."""
    pass


class User( Base ):
    """
    User account model.

    Requires:
        - email: Valid unique email address (stored lower-case)
        - password_hash: Hashed password (never store plaintext)

    Ensures:
        - id is automatically generated UUID
        - created_at / updated_at default to current UTC timestamp
        - relationships cascade delete to todos and chat messages
    """
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4
    )
    email: Mapped[str] = mapped_column(
        String( 255 ),
        unique=True,
        nullable=False
    )
    password_hash: Mapped[str] = mapped_column(
        String( 255 ),
        nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime( timezone=True ),
        nullable=False,
        default=utc_now,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime( timezone=True ),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
        server_default=func.now()
    )

    todos: Mapped[List["Todo"]] = relationship(
        "Todo",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True
    )
    chat_messages: Mapped[List["ChatMessage"]] = relationship(
        "ChatMessage",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    def __repr__( self ) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"


class Todo( Base ):
    """
    Todo item owned by exactly one user.

    Requires:
        - user_id: Valid user UUID
        - title: 1..200 characters

    Ensures:
        - status defaults to PENDING, priority to MEDIUM
        - due_date is optional and stored as UTC
        - cascades delete when user is deleted
    """
    __tablename__ = "todos"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey( "users.id", ondelete="CASCADE" ),
        nullable=False
    )

    title: Mapped[str] = mapped_column(
        String( 200 ),
        nullable=False
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True
    )
    status: Mapped[TodoStatus] = mapped_column(
        SqlEnum( TodoStatus, name="todo_status" ),
        nullable=False,
        default=TodoStatus.PENDING
    )
    priority: Mapped[TodoPriority] = mapped_column(
        SqlEnum( TodoPriority, name="todo_priority" ),
        nullable=False,
        default=TodoPriority.MEDIUM
    )
    due_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime( timezone=True ),
        nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime( timezone=True ),
        nullable=False,
        default=utc_now,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime( timezone=True ),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
        server_default=func.now()
    )

    user: Mapped["User"] = relationship(
        "User",
        back_populates="todos"
    )

    __table_args__ = (
        Index( 'idx_todos_user_id', 'user_id' ),
        Index( 'idx_todos_user_status', 'user_id', 'status' ),
        Index( 'idx_todos_due_date', 'due_date' ),
    )

    def __repr__( self ) -> str:
        return f"<Todo(id={self.id}, title='{self.title}', status={self.status.value})>"


class ChatMessage( Base ):
    """
    One turn of a user's chat with the assistant.

    Ensures:
        - role is USER for what the user typed, ASSISTANT for the reply
        - created_at gives chronological order of the conversation
    """
    __tablename__ = "chat_messages"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey( "users.id", ondelete="CASCADE" ),
        nullable=False
    )
    role: Mapped[ChatRole] = mapped_column(
        SqlEnum( ChatRole, name="chat_role" ),
        nullable=False
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime( timezone=True ),
        nullable=False,
        default=utc_now,
        server_default=func.now()
    )

    user: Mapped["User"] = relationship(
        "User",
        back_populates="chat_messages"
    )

    __table_args__ = (
        Index( 'idx_chat_messages_user_created', 'user_id', 'created_at' ),
    )

    def __repr__( self ) -> str:
        return f"<ChatMessage(id={self.id}, role={self.role.value}, user_id={self.user_id})>"
