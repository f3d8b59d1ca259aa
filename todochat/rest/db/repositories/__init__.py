"""
Repository pattern implementation for the ORM models.

Exports all repository classes for clean imports:
    from todochat.rest.db.repositories import UserRepository, TodoRepository
"""

from todochat.rest.db.repositories.base import BaseRepository
from todochat.rest.db.repositories.user_repository import UserRepository
from todochat.rest.db.repositories.todo_repository import TodoRepository
from todochat.rest.db.repositories.chat_message_repository import ChatMessageRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "TodoRepository",
    "ChatMessageRepository",
]
