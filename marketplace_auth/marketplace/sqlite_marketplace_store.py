# marketplace_auth/marketplace/sqlite_marketplace_store.py
import sqlite3
import logging
from typing import Optional, List
from datetime import datetime, timezone

from .storage_interfaces import AbstractMarketplaceStore
from .models import MarketplaceRecord
from ..settings import settings
from ..storage.sqlite_base import get_sqlite_db_connection, marketplace_table_ddl

logger = logging.getLogger(__name__)


class SQLiteMarketplaceStore(AbstractMarketplaceStore):
    """SQLite implementation of the marketplace record table."""

    def __init__(self, table_name: Optional[str] = None):
        self.table_name = table_name or settings.marketplace_table_name

    async def initialize(self) -> None:
        await get_sqlite_db_connection()
        logger.info(f"SQLiteMarketplaceStore initialized (table '{self.table_name}').")

    async def teardown(self) -> None:
        """Connection is managed globally so no action needed."""
        logger.info("SQLiteMarketplaceStore teardown (connection managed globally).")

    async def _execute_query(self, query: str, params: tuple = (), commit: bool = True) -> sqlite3.Cursor:
        """
        Execute a SQL query, committing or rolling back as requested.

        Raises:
            sqlite3.Error: If query execution fails
        """
        conn = await get_sqlite_db_connection()
        cursor = conn.cursor()
        try:
            cursor.execute(query, params)
            if commit:
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"SQLite error executing query '{query}': {e}", exc_info=True)
            if commit:
                conn.rollback()
            raise
        return cursor

    async def _fetchall(self, query: str, params: tuple = ()) -> List[sqlite3.Row]:
        cursor = await self._execute_query(query, params, commit=False)
        return cursor.fetchall()

    def _row_to_record(self, row: Optional[sqlite3.Row]) -> Optional[MarketplaceRecord]:
        if not row:
            return None
        try:
            updated_at = row["updated_at"]
            if isinstance(updated_at, str):
                updated_at = datetime.fromisoformat(updated_at.replace("Z", "+00:00"))
            return MarketplaceRecord(
                account_id=row["account_id"],
                account_login=row["account_login"],
                account_type=row["account_type"],
                plan_id=row["plan_id"],
                updated_at=updated_at,
            )
        except Exception as e:
            logger.error(f"Error converting row to MarketplaceRecord: {dict(row)}. Error: {e}", exc_info=True)
            return None

    async def ensure_table(self) -> None:
        await self._execute_query(marketplace_table_ddl(self.table_name))

    async def upsert_record(self, record: MarketplaceRecord) -> MarketplaceRecord:
        updated_at = datetime.now(timezone.utc)
        # Null fields in the incoming record keep the stored value
        query = f"""
            INSERT INTO {self.table_name} (account_id, account_login, account_type, plan_id, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT (account_id, account_login) DO UPDATE SET
                account_type = COALESCE(excluded.account_type, {self.table_name}.account_type),
                plan_id = COALESCE(excluded.plan_id, {self.table_name}.plan_id),
                updated_at = excluded.updated_at
        """
        params = (
            record.account_id,
            record.account_login,
            record.account_type,
            record.plan_id,
            updated_at.isoformat(),
        )
        await self._execute_query(query, params)
        logger.debug(
            f"Upserted marketplace record ({record.account_id}, '{record.account_login}') "
            f"plan_id={record.plan_id}"
        )
        stored = await self._fetchall(
            f"SELECT * FROM {self.table_name} WHERE account_id = ? AND account_login = ?",
            (record.account_id, record.account_login)
        )
        return self._row_to_record(stored[0]) if stored else record

    async def get_records_for_account(self, account_id: int) -> List[MarketplaceRecord]:
        query = f"""
            SELECT account_id, account_login, account_type, plan_id, updated_at
            FROM {self.table_name}
            WHERE account_id = ?
            ORDER BY account_login
        """
        rows = await self._fetchall(query, (account_id,))
        return [r for row in rows if (r := self._row_to_record(row)) is not None]

    async def list_records(self, skip: int = 0, limit: int = 100) -> List[MarketplaceRecord]:
        query = f"""
            SELECT account_id, account_login, account_type, plan_id, updated_at
            FROM {self.table_name}
            ORDER BY updated_at DESC
            LIMIT ? OFFSET ?
        """
        rows = await self._fetchall(query, (limit, skip))
        return [r for row in rows if (r := self._row_to_record(row)) is not None]
