# marketplace_auth/marketplace/storage_interfaces.py
from abc import ABC, abstractmethod
from typing import List

from .models import MarketplaceRecord


class AbstractMarketplaceStore(ABC):
    """Keyed insert-or-merge table of marketplace records."""

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the storage backend."""
        pass

    @abstractmethod
    async def teardown(self) -> None:
        """Clean up storage resources."""
        pass

    @abstractmethod
    async def ensure_table(self) -> None:
        """Create the destination table if absent. A no-op when it exists."""
        pass

    @abstractmethod
    async def upsert_record(self, record: MarketplaceRecord) -> MarketplaceRecord:
        """
        Insert the record, or merge its non-null fields into the row with the
        same (account_id, account_login) key.
        """
        pass

    @abstractmethod
    async def get_records_for_account(self, account_id: int) -> List[MarketplaceRecord]:
        """All records stored for an account id (one per login)."""
        pass

    @abstractmethod
    async def list_records(self, skip: int = 0, limit: int = 100) -> List[MarketplaceRecord]:
        """Paginated listing, most recently updated first."""
        pass
