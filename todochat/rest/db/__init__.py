"""
Database package for the ORM session and repository pattern.

Exports:
    - get_db: Context manager for database sessions
    - engine: SQLAlchemy engine
    - SessionLocal: Session factory
    - init_db / check_database_connection: startup and readiness helpers
"""

from todochat.rest.db.database import get_db, engine, SessionLocal, init_db, check_database_connection

__all__ = [ "get_db", "engine", "SessionLocal", "init_db", "check_database_connection" ]
