# marketplace_auth/marketplace/models.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime


class PurchaseAccount(BaseModel):
    """GitHub account that owns a marketplace purchase."""
    model_config = ConfigDict(extra="ignore")

    id: int
    login: str
    type: Optional[str] = Field(default=None, description="'User' or 'Organization'.")


class PurchasePlan(BaseModel):
    """Marketplace plan attached to a purchase."""
    model_config = ConfigDict(extra="ignore")

    id: int
    name: Optional[str] = None


class MarketplacePurchase(BaseModel):
    """One entry of the `/user/marketplace_purchases` response."""
    model_config = ConfigDict(extra="ignore")

    account: PurchaseAccount
    plan: PurchasePlan


class MarketplaceRecord(BaseModel):
    """Stored association between an account and its purchased plan."""
    account_id: int
    account_login: str
    account_type: Optional[str] = None
    plan_id: Optional[int] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_purchase(cls, purchase: MarketplacePurchase) -> "MarketplaceRecord":
        return cls(
            account_id=purchase.account.id,
            account_login=purchase.account.login,
            account_type=purchase.account.type,
            plan_id=purchase.plan.id,
        )
