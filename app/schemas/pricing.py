from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.markup_rule import MarkupType, RuleKind


class PricingRequest(BaseModel):
    volume: int
    country_code: Optional[str] = None
    sms_type: Optional[str] = None
    base_cost: Optional[Decimal] = None


class PricingResultOut(BaseModel):
    base_cost: Decimal
    markup: Decimal
    markup_type: MarkupType
    client_price: Decimal
    profit: Decimal
    markup_rule_id: Optional[int] = None
    markup_rule_name: Optional[str] = None


class PricingTestOut(BaseModel):
    test_parameters: PricingRequest
    result: PricingResultOut


class BulkPricingRequest(BaseModel):
    volumes: list[int] = Field(default_factory=list)
    country_code: Optional[str] = None
    sms_type: Optional[str] = None


class BulkPricingItem(PricingResultOut):
    volume: int


class BulkPricingOut(BaseModel):
    bulk_pricing: list[BulkPricingItem]
    total_volume: int
    average_price: Decimal


class MarkupRuleCreate(BaseModel):
    name: str
    markup_type: MarkupType
    markup_value: Decimal
    min_volume: int = 0
    max_volume: Optional[int] = None
    country_code: Optional[str] = None
    sms_type: Optional[str] = None
    priority: int = 0
    is_active: bool = True


class MarkupRuleUpdate(BaseModel):
    name: Optional[str] = None
    markup_type: Optional[MarkupType] = None
    markup_value: Optional[Decimal] = None
    min_volume: Optional[int] = None
    max_volume: Optional[int] = None
    country_code: Optional[str] = None
    sms_type: Optional[str] = None
    priority: Optional[int] = None
    is_active: Optional[bool] = None


class MarkupRuleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    kind: RuleKind
    markup_type: MarkupType
    markup_value: Decimal
    min_volume: int
    max_volume: Optional[int] = None
    country_code: Optional[str] = None
    sms_type: Optional[str] = None
    priority: int
    is_active: bool
    created_at: datetime


class PricingTierCreate(BaseModel):
    name: str
    min_volume: int
    max_volume: Optional[int] = None
    discount_percentage: Decimal
    is_active: bool = True


class ProfitTransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    transaction_id: str
    transaction_type: str
    base_cost: Decimal
    client_charge: Decimal
    profit: Decimal
    markup_applied: Decimal
    volume: int
    country_code: Optional[str] = None
    created_at: datetime


class ProfitByType(BaseModel):
    type: str
    profit: Decimal
    count: int


class ProfitAnalyticsOut(BaseModel):
    period: str
    total_profit: Decimal
    total_transactions: int
    profit_by_type: list[ProfitByType]
    recent_transactions: list[ProfitTransactionOut]


class UsageStatsOut(BaseModel):
    total_volume: int
    total_cost: Decimal
    average_monthly_volume: int
    top_countries: list[str]
    average_cost_per_sms: Decimal


class RecommendationOut(BaseModel):
    type: str
    title: str
    description: str
    suggested_markup: Optional[Decimal] = None
    potential_savings: Optional[Decimal] = None
    suggested_action: Optional[str] = None


class RecommendationsOut(BaseModel):
    recommendations: list[RecommendationOut]
    current_markup: Decimal
    usage_stats: UsageStatsOut
