"""
Database session management with SQLAlchemy.

Provides:
    - Database URL lookup (DATABASE_URL env var, then configuration)
    - SQLAlchemy engine with dialect-appropriate connection pooling
    - Session factory
    - Context manager for automatic session lifecycle management
    - Table creation and a connectivity probe for readiness checks

Usage:
    from todochat.rest.db.database import get_db

    with get_db() as session:
        todo = session.query( Todo ).filter( Todo.id == todo_id ).first()
        # session.commit() called automatically on success
        # session.rollback() called automatically on exception
"""

import logging
import os
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from todochat.config.configuration_manager import ConfigurationManager
from todochat.rest.postgres_models import Base

logger = logging.getLogger( __name__ )

config_mgr = ConfigurationManager()


def get_database_url() -> str:
    """
    Get the database connection string.

    Ensures:
        - DATABASE_URL environment variable wins when set
        - Otherwise returns the configured "database url"

    Raises:
        ValueError: If no URL is available
    """
    url = os.environ.get( "DATABASE_URL" ) or config_mgr.get( "database url", default=None )
    if not url:
        raise ValueError( "No database URL: set DATABASE_URL or the [database url] configuration key" )

    return url


def get_pool_config( url: str ) -> dict:
    """
    Get engine configuration for the given database URL.

    Ensures:
        - SQLite: one shared connection (StaticPool) usable across threads, so an
          in-memory database survives between sessions
        - Everything else: persistent pool sized from configuration, pre-ping on
          checkout, connections recycled periodically

    Returns:
        Dictionary of create_engine keyword arguments
    """
    echo = config_mgr.get( "database echo", default=False, return_type="boolean" )

    if url.startswith( "sqlite" ):
        return {
            "poolclass"    : StaticPool,
            "echo"         : echo,
            "connect_args" : { "check_same_thread": False }
        }

    return {
        "pool_size"     : config_mgr.get( "database pool size", default=10, return_type="int" ),
        "max_overflow"  : config_mgr.get( "database max overflow", default=20, return_type="int" ),
        "pool_pre_ping" : True,
        "pool_recycle"  : config_mgr.get( "database pool recycle", default=7200, return_type="int" ),
        "pool_timeout"  : 30,
        "echo"          : echo
    }


_database_url = get_database_url()

engine = create_engine(
    _database_url,
    **get_pool_config( _database_url )
)

# expire_on_commit=False keeps loaded attributes readable after get_db() closes the session
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine
)


@contextmanager
def get_db() -> Generator[Session, None, None]:
    """
    Context manager for database sessions with automatic lifecycle management.

    Ensures:
        - Session created from SessionLocal factory
        - Automatic commit on success
        - Automatic rollback on exception
        - Session always closed (prevents connection leaks)

    Yields:
        SQLAlchemy Session instance

    Raises:
        Any exception from database operations (re-raised after rollback)
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db() -> None:
    """Create any missing tables."""
    Base.metadata.create_all( bind=engine )
    logger.info( "Database tables ready" )


def drop_db() -> None:
    """Drop every table. Only used to reset the test database."""
    Base.metadata.drop_all( bind=engine )


def check_database_connection() -> bool:
    """
    Probe the database with SELECT 1.

    Ensures:
        - Returns True when the query succeeds
        - Returns False (and logs) on any error, never raises
    """
    try:
        with get_db() as session:
            session.execute( text( "SELECT 1" ) )
        logger.info( "Database connection successful" )
        return True
    except Exception as e:
        logger.error( f"Database connection failed: {e}" )
        return False


def quick_smoke_test():
    """
    Quick smoke test for database connection and session management.

    Tests:
        - Engine creation
        - Table creation
        - get_db() context manager and SELECT 1
    """
    import todochat.utils.util as du

    du.print_banner( "Database Session Management Smoke Test", prepend_nl=True )

    print( f"✓ Engine created: {engine.driver}" )
    init_db()
    print( "✓ Tables created" )

    if check_database_connection():
        print( "✓ Connected successfully" )
    else:
        print( "✗ Connection failed" )


if __name__ == "__main__":
    quick_smoke_test()
