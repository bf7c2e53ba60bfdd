# marketplace_auth/marketplace/storage.py
import logging
from typing import Optional

from ..settings import settings
from .storage_interfaces import AbstractMarketplaceStore
from .sqlite_marketplace_store import SQLiteMarketplaceStore
from .redis_marketplace_store import RedisMarketplaceStore

logger = logging.getLogger(__name__)

_marketplace_store_instance: Optional[AbstractMarketplaceStore] = None


async def get_marketplace_store() -> AbstractMarketplaceStore:
    """
    Return the marketplace store for the configured storage backend,
    creating and initializing it on first use.
    """
    global _marketplace_store_instance

    if _marketplace_store_instance is None:
        if settings.storage_backend == "sqlite":
            logger.info("Using SQLiteMarketplaceStore for marketplace records.")
            store: AbstractMarketplaceStore = SQLiteMarketplaceStore()
        elif settings.storage_backend == "redis":
            logger.info("Using RedisMarketplaceStore for marketplace records.")
            store = RedisMarketplaceStore()
        else:
            raise ValueError(f"Unsupported storage_backend for marketplace records: {settings.storage_backend}")
        await store.initialize()
        _marketplace_store_instance = store

    return _marketplace_store_instance


async def reset_marketplace_store() -> None:
    """Tear down and forget the cached store instance."""
    global _marketplace_store_instance
    if _marketplace_store_instance is not None:
        await _marketplace_store_instance.teardown()
        _marketplace_store_instance = None
