# marketplace_auth/marketplace/service.py
import logging
from typing import Any, Dict, List

from pydantic import ValidationError as PydanticValidationError

from .models import MarketplacePurchase, MarketplaceRecord
from .storage_interfaces import AbstractMarketplaceStore
from ..oauth.errors import MarketplaceSyncError
from ..oauth.provider import GitHubOAuthClient

logger = logging.getLogger(__name__)


class MarketplaceSyncService:
    """
    Copies a user's marketplace purchases from the provider into the
    marketplace record table.
    """

    def __init__(self, provider_client: GitHubOAuthClient, marketplace_store: AbstractMarketplaceStore):
        self.provider_client = provider_client
        self.marketplace_store = marketplace_store

    @staticmethod
    def parse_purchases(plan_data: List[Dict[str, Any]]) -> List[MarketplacePurchase]:
        try:
            return [MarketplacePurchase.model_validate(item) for item in plan_data]
        except PydanticValidationError as e:
            raise MarketplaceSyncError(f"Unreadable marketplace purchase entry: {e.errors()}") from e

    async def store_purchases(self, purchases: List[MarketplacePurchase]) -> int:
        """Upsert one record per purchase. Returns the number of records written."""
        count = 0
        for purchase in purchases:
            await self.marketplace_store.ensure_table()
            await self.marketplace_store.upsert_record(MarketplaceRecord.from_purchase(purchase))
            count += 1
        return count

    async def sync_purchases(self, access_token: str) -> int:
        """
        Fetch the purchases visible to `access_token` and upsert them.

        Raises:
            MarketplaceSyncError: The payload could not be parsed or stored.
            httpx.HTTPError: The marketplace API call itself failed.
        """
        plan_data = await self.provider_client.fetch_marketplace_purchases(access_token)
        purchases = self.parse_purchases(plan_data)
        try:
            count = await self.store_purchases(purchases)
        except MarketplaceSyncError:
            raise
        except Exception as e:
            raise MarketplaceSyncError(f"Storing marketplace records failed: {e}") from e
        logger.info(f"Service: Synced {count} marketplace record(s).")
        return count

    async def list_records(self, skip: int = 0, limit: int = 100) -> List[MarketplaceRecord]:
        logger.info(f"Service: Listing marketplace records with skip: {skip}, limit: {limit}")
        return await self.marketplace_store.list_records(skip=skip, limit=limit)

    async def get_records_for_account(self, account_id: int) -> List[MarketplaceRecord]:
        logger.info(f"Service: Getting marketplace records for account_id: {account_id}")
        return await self.marketplace_store.get_records_for_account(account_id)
