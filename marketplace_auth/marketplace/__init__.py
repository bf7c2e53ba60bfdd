# marketplace_auth/marketplace/__init__.py
"""
Marketplace purchase records: models, storage backends, the sync service
and the admin endpoints.
"""

from .models import MarketplacePurchase, MarketplaceRecord, PurchaseAccount, PurchasePlan
from .storage_interfaces import AbstractMarketplaceStore
from .sqlite_marketplace_store import SQLiteMarketplaceStore
from .redis_marketplace_store import RedisMarketplaceStore
from .storage import get_marketplace_store
from .service import MarketplaceSyncService

__all__ = [
    "MarketplacePurchase",
    "MarketplaceRecord",
    "PurchaseAccount",
    "PurchasePlan",
    "AbstractMarketplaceStore",
    "SQLiteMarketplaceStore",
    "RedisMarketplaceStore",
    "get_marketplace_store",
    "MarketplaceSyncService",
]
