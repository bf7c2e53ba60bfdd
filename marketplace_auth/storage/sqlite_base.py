# marketplace_auth/storage/sqlite_base.py
import sqlite3
import logging
from pathlib import Path
from typing import Optional

from ..settings import settings

logger = logging.getLogger(__name__)

# Single connection per application lifecycle
_db_connection: Optional[sqlite3.Connection] = None


async def get_sqlite_db_connection() -> sqlite3.Connection:
    """
    Get or create the process-wide SQLite connection.

    Ensures the database directory exists and initializes the schema on
    first connection.

    Raises:
        sqlite3.Error: If database connection fails
    """
    global _db_connection
    if _db_connection is None:
        try:
            db_path = Path(settings.sqlite_db_path).resolve()
            db_path.parent.mkdir(parents=True, exist_ok=True)

            logger.info(f"Attempting to connect to SQLite DB at: {db_path}")

            # Shared across FastAPI worker threads
            _db_connection = sqlite3.connect(str(db_path), check_same_thread=False)
            _db_connection.row_factory = sqlite3.Row

            logger.info(f"Successfully connected to SQLite DB: {db_path}")

            await init_sqlite_db(_db_connection)
        except sqlite3.Error as e:
            logger.error(
                f"Error connecting to SQLite database at {settings.sqlite_db_path}: {e}",
                exc_info=True
            )
            raise
    return _db_connection


def marketplace_table_ddl(table_name: str) -> str:
    """CREATE TABLE statement for the marketplace records table."""
    return f'''
    CREATE TABLE IF NOT EXISTS {table_name} (
        account_id INTEGER NOT NULL,
        account_login TEXT NOT NULL,
        account_type TEXT,
        plan_id INTEGER,
        updated_at TEXT NOT NULL,
        PRIMARY KEY (account_id, account_login)
    )
    '''


async def init_sqlite_db(conn: Optional[sqlite3.Connection] = None):
    """
    Initialize the SQLite schema. Uses IF NOT EXISTS so repeated calls
    are harmless.
    """
    db_conn = conn or await get_sqlite_db_connection()
    cursor = db_conn.cursor()

    cursor.execute(marketplace_table_ddl(settings.marketplace_table_name))
    logger.info(f"Ensured '{settings.marketplace_table_name}' table exists.")

    db_conn.commit()
    logger.info("SQLite database schema initialized/verified.")


async def close_sqlite_db_connection():
    """Close the global SQLite connection. Called on application shutdown."""
    global _db_connection
    if _db_connection is not None:
        logger.info("Closing SQLite DB connection.")
        _db_connection.close()
        _db_connection = None
        logger.info("SQLite DB connection closed.")
