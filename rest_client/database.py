"""
Database configuration and initialization for the REST Client service.

Uses SQLite as the request history backend with SQLAlchemy ORM.
"""

import os

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

# SQLite database URL - file-based storage, overridable for deployments and tests
DATABASE_URL = os.environ.get("REST_CLIENT_DATABASE_URL", "sqlite:///./rest_client.db")

# Create engine with SQLite-specific settings
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},  # Required for SQLite with FastAPI
    echo=False  # Set to True for SQL query logging
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


def init_db():
    """
    Create the history tables if they don't exist.

    Called once at application startup.
    """
    from . import models  # noqa: F401  registers the mapped tables

    Base.metadata.create_all(bind=engine)


def get_db():
    """
    Dependency function for FastAPI to get database sessions.

    Yields a database session and ensures it's closed after use.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
