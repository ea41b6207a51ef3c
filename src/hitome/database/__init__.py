"""
Database connection and utilities.
"""

from .connection import (
    Base,
    engine,
    async_session_factory,
    make_engine,
    make_session_factory,
    get_db,
    init_db,
    close_db,
)

__all__ = [
    "Base",
    "engine",
    "async_session_factory",
    "make_engine",
    "make_session_factory",
    "get_db",
    "init_db",
    "close_db",
]
