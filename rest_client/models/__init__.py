"""
Models package for the REST Client service.

Exports all SQLAlchemy models for database operations.
"""

from .history import History

__all__ = [
    "History",
]
