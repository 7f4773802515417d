from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import require_reseller
from app.models import User
from app.schemas.pricing import (
    BulkPricingOut,
    BulkPricingRequest,
    MarkupRuleOut,
    PricingRequest,
    PricingResultOut,
    PricingTestOut,
    PricingTierCreate,
    ProfitAnalyticsOut,
    RecommendationsOut,
)
from app.services.markup_rules import create_pricing_tier, list_pricing_tiers
from app.services.pricing import calculate_bulk_pricing, calculate_pricing
from app.services.profit import get_profit_analytics
from app.services.recommendations import get_pricing_recommendations

router = APIRouter()


def _price(db: Session, user: User, payload: PricingRequest) -> dict:
    if payload.volume <= 0:
        raise HTTPException(status_code=400, detail="Valid volume is required")
    result = calculate_pricing(
        db,
        user.id,
        payload.volume,
        payload.country_code,
        payload.sms_type,
        payload.base_cost,
    )
    return result.as_dict()


@router.post("/calculate", response_model=PricingResultOut)
def calculate(payload: PricingRequest, user: User = Depends(require_reseller), db: Session = Depends(get_db)):
    return _price(db, user, payload)


@router.post("/test", response_model=PricingTestOut)
def test_markup_rule(payload: PricingRequest, user: User = Depends(require_reseller), db: Session = Depends(get_db)):
    return {"test_parameters": payload, "result": _price(db, user, payload)}


@router.post("/bulk-calculate", response_model=BulkPricingOut)
def bulk_calculate(payload: BulkPricingRequest, user: User = Depends(require_reseller), db: Session = Depends(get_db)):
    return calculate_bulk_pricing(db, user.id, payload.volumes, payload.country_code, payload.sms_type)


@router.get("/analytics", response_model=ProfitAnalyticsOut)
def profit_analytics(days: int = 30, user: User = Depends(require_reseller), db: Session = Depends(get_db)):
    return get_profit_analytics(db, user.id, days)


@router.get("/recommendations", response_model=RecommendationsOut)
def recommendations(user: User = Depends(require_reseller), db: Session = Depends(get_db)):
    return get_pricing_recommendations(db, user.id)


@router.get("/tiers", response_model=list[MarkupRuleOut])
def get_tiers(user: User = Depends(require_reseller), db: Session = Depends(get_db)):
    return list_pricing_tiers(db, user.id)


@router.post("/tiers", response_model=MarkupRuleOut, status_code=201)
def create_tier(payload: PricingTierCreate, user: User = Depends(require_reseller), db: Session = Depends(get_db)):
    return create_pricing_tier(
        db,
        user_id=user.id,
        name=payload.name,
        min_volume=payload.min_volume,
        max_volume=payload.max_volume,
        discount_percentage=payload.discount_percentage,
        is_active=payload.is_active,
    )
