# marketplace_auth/storage/__init__.py

"""Storage module initialization.

Shared SQLite connection handling used by the marketplace record store.
"""

from .sqlite_base import (
    get_sqlite_db_connection,
    init_sqlite_db,
    close_sqlite_db_connection,
    marketplace_table_ddl
)

__all__ = [
    "get_sqlite_db_connection",
    "init_sqlite_db",
    "close_sqlite_db_connection",
    "marketplace_table_ddl"
]
