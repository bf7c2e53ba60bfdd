# marketplace_auth/marketplace/redis_marketplace_store.py
import logging
from typing import Optional, List, Dict
from datetime import datetime, timezone

import redis.asyncio as aioredis

from ..settings import settings
from .storage_interfaces import AbstractMarketplaceStore
from .models import MarketplaceRecord

logger = logging.getLogger(__name__)


class RedisMarketplaceStore(AbstractMarketplaceStore):
    """
    Redis implementation of the marketplace record table.

    Each record is a hash at `<table>:<account_id>:<account_login>`. HSET only
    touches the fields it is given, which gives insert-or-merge semantics.
    A sorted set scored by update time indexes the keys for listing.
    """

    def __init__(self, table_name: Optional[str] = None, redis_client: Optional[aioredis.Redis] = None):
        self.table_name = table_name or settings.marketplace_table_name
        self._redis_client: Optional[aioredis.Redis] = redis_client

    async def initialize(self) -> None:
        """Establish Redis connection using global settings."""
        if self._redis_client:
            return

        connection_params = {
            "host": settings.redis_host,
            "port": settings.redis_port,
            "db": settings.redis_db,
            "ssl": settings.redis_ssl,
            "decode_responses": True,
        }
        if settings.redis_password:
            connection_params["password"] = settings.redis_password

        try:
            self._redis_client = aioredis.Redis(**connection_params)  # type: ignore
            await self._redis_client.ping()
            logger.info("RedisMarketplaceStore: Connected.")
        except Exception as e:
            logger.error(f"RedisMarketplaceStore: Connect failed: {e}", exc_info=True)
            self._redis_client = None
            raise

    async def teardown(self) -> None:
        if self._redis_client:
            await self._redis_client.aclose()
            self._redis_client = None
            logger.info("RedisMarketplaceStore: Closed.")

    async def _get_client(self) -> aioredis.Redis:
        if not self._redis_client:
            await self.initialize()
            if not self._redis_client:
                raise RuntimeError("RedisMarketplaceStore not initialized or connection failed.")
        return self._redis_client

    def _get_key(self, account_id: int, account_login: str) -> str:
        return f"{self.table_name}:{account_id}:{account_login}"

    def _index_key(self) -> str:
        return f"{self.table_name}:index"

    def _hash_to_record(self, data: Dict[str, str]) -> Optional[MarketplaceRecord]:
        if not data:
            return None
        try:
            return MarketplaceRecord(
                account_id=int(data["account_id"]),
                account_login=data["account_login"],
                account_type=data.get("account_type") or None,
                plan_id=int(data["plan_id"]) if data.get("plan_id") else None,
                updated_at=datetime.fromisoformat(data["updated_at"]) if data.get("updated_at") else None,
            )
        except Exception as e:
            logger.error(f"Error deserializing Redis marketplace record {data}: {e}")
            return None

    async def ensure_table(self) -> None:
        # Keys are created on first write
        client = await self._get_client()
        await client.ping()

    async def upsert_record(self, record: MarketplaceRecord) -> MarketplaceRecord:
        client = await self._get_client()
        key = self._get_key(record.account_id, record.account_login)
        updated_at = datetime.now(timezone.utc)

        mapping = {
            "account_id": str(record.account_id),
            "account_login": record.account_login,
            "updated_at": updated_at.isoformat(),
        }
        if record.account_type is not None:
            mapping["account_type"] = record.account_type
        if record.plan_id is not None:
            mapping["plan_id"] = str(record.plan_id)

        await client.hset(key, mapping=mapping)
        await client.zadd(self._index_key(), {key: updated_at.timestamp()})
        logger.debug(f"Upserted Redis marketplace record {key} plan_id={record.plan_id}")

        stored = self._hash_to_record(await client.hgetall(key))
        return stored or record

    async def get_records_for_account(self, account_id: int) -> List[MarketplaceRecord]:
        client = await self._get_client()
        records: List[MarketplaceRecord] = []
        async for key in client.scan_iter(match=f"{self.table_name}:{account_id}:*"):
            record = self._hash_to_record(await client.hgetall(key))
            if record is not None and record.account_id == account_id:
                records.append(record)
        return sorted(records, key=lambda r: r.account_login)

    async def list_records(self, skip: int = 0, limit: int = 100) -> List[MarketplaceRecord]:
        client = await self._get_client()
        keys = await client.zrevrange(self._index_key(), skip, skip + limit - 1)
        records: List[MarketplaceRecord] = []
        for key in keys:
            record = self._hash_to_record(await client.hgetall(key))
            if record is not None:
                records.append(record)
        return records
