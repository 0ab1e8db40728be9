"""
Database Adapters

Implements the DatabaseAdapter interface for SQLite (default) and PostgreSQL.

SQLite is a file-based database that's perfect for:
- Local development
- Testing
- Single-instance deployments

PostgreSQL is selected automatically when DATABASE_URL uses the
postgresql+asyncpg:// scheme.
"""

from typing import Any, Optional

from sqlalchemy.pool import NullPool, Pool

from shortlink.db.interface import DatabaseAdapter


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter implementation.

    Key characteristics:
    - NullPool: a fresh connection per session (file-based, no pooling needed)
    - check_same_thread=False: required for aiosqlite
    - Single writer at a time; concurrent inserts wait on the file lock
    """

    def get_pool_class(self) -> type[NullPool]:
        return NullPool

    def get_connect_args(self) -> dict[str, Any]:
        return {
            "check_same_thread": False
        }

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False  # Set to True only for SQL debugging in development
        }

    def get_dialect_name(self) -> str:
        return "sqlite"


class PostgreSQLAdapter(DatabaseAdapter):
    """
    PostgreSQL adapter (asyncpg driver).

    Uses SQLAlchemy's default queue pool with pre-ping so connections
    dropped by the server are replaced transparently.
    """

    def __init__(self, pool_size: int = 10, max_overflow: int = 20):
        self.pool_size = pool_size
        self.max_overflow = max_overflow

    def get_pool_class(self) -> Optional[type[Pool]]:
        return None

    def get_connect_args(self) -> dict[str, Any]:
        return {}

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False,
            "pool_pre_ping": True,
            "pool_size": self.pool_size,
            "max_overflow": self.max_overflow,
        }

    def get_dialect_name(self) -> str:
        return "postgresql"


def get_database_adapter(database_url: str = "") -> DatabaseAdapter:
    """
    Factory function to get the database adapter for a connection string.

    Args:
        database_url: SQLAlchemy URL; anything that is not PostgreSQL
            is treated as SQLite

    Returns:
        DatabaseAdapter instance
    """
    if database_url.startswith(("postgresql", "postgres")):
        return PostgreSQLAdapter()
    return SQLiteAdapter()
