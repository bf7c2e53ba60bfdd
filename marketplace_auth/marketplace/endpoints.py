# marketplace_auth/marketplace/endpoints.py
import logging
from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from typing import List, Annotated

from .models import MarketplaceRecord
from .service import MarketplaceSyncService
from ..dependencies import get_admin_api_key, get_marketplace_sync_service

logger = logging.getLogger(__name__)

# Admin router for stored marketplace records - requires admin API key authentication
marketplace_admin_router = APIRouter(
    prefix="/admin/marketplace",
    tags=["Admin - Marketplace"],
    dependencies=[Depends(get_admin_api_key)]
)


@marketplace_admin_router.get("/", response_model=List[MarketplaceRecord])
@marketplace_admin_router.get("", response_model=List[MarketplaceRecord], include_in_schema=False)
async def list_marketplace_records_endpoint(
    service: Annotated[MarketplaceSyncService, Depends(get_marketplace_sync_service)],
    skip: Annotated[int, Query(ge=0, description="Number of records to skip.")] = 0,
    limit: Annotated[int, Query(ge=1, le=100, description="Maximum number of records to return.")] = 100
):
    """List stored marketplace records, most recently updated first."""
    return await service.list_records(skip=skip, limit=limit)


@marketplace_admin_router.get("/{account_id}", response_model=List[MarketplaceRecord])
async def get_marketplace_records_endpoint(
    account_id: Annotated[int, Path(description="GitHub account id")],
    service: Annotated[MarketplaceSyncService, Depends(get_marketplace_sync_service)]
):
    """Records stored for one account id. Returns 404 if there are none."""
    records = await service.get_records_for_account(account_id)
    if not records:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No marketplace records for account")
    return records
