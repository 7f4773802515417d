from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from app.models.pricing_tier import PricingTier


class AssignPricingTierRequest(BaseModel):
    tier: PricingTier
    custom_default_markup: Optional[Decimal] = None


class PricingTierAssignmentOut(BaseModel):
    user_id: int
    tier: PricingTier
    custom_pricing: Optional[dict] = None
    is_active: bool
