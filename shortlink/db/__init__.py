"""
Database module with abstraction layer.

This module provides:
- DatabaseAdapter interface: Abstract base class for database implementations
- SQLiteAdapter / PostgreSQLAdapter: concrete backends
- Session management: Database session creation and management
"""

from shortlink.db.interface import DatabaseAdapter
from shortlink.db.session import create_session_maker, get_session
from shortlink.db.sqlite_adapter import get_database_adapter

__all__ = [
    "DatabaseAdapter",
    "create_session_maker",
    "get_database_adapter",
    "get_session",
]
