"""
Database configuration and session management.

This module sets up the SQLAlchemy engine and session factory used to
persist job status and extracted credit items.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import get_settings

# Base class for declarative models
Base = declarative_base()

_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def get_engine() -> Engine:
    """Create the SQLAlchemy engine lazily from settings."""
    global _engine
    if _engine is None:
        settings = get_settings()
        # pool_pre_ping: Verify connections are alive before using them
        _engine = create_engine(
            settings.database_url,
            pool_pre_ping=True,
            echo=settings.sql_debug,
        )
    return _engine


def get_session_factory() -> sessionmaker:
    """Get or create the session factory bound to the application engine."""
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=get_engine(),
        )
    return _session_factory


def init_db(engine: Engine | None = None) -> None:
    """
    Initialize the database by creating all tables.

    Note: In production the tables are owned by the persistence store's
    own migrations.
    """
    # Import models to ensure they are registered with Base
    from . import models_db  # noqa: F401

    Base.metadata.create_all(bind=engine or get_engine())
