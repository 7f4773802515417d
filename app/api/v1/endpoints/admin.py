from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.dependencies import require_admin
from app.models import User, UserRole, UserPricingTier, PricingTier
from app.schemas.admin import AssignPricingTierRequest, PricingTierAssignmentOut

router = APIRouter()


@router.put("/users/{user_id}/pricing-tier", response_model=PricingTierAssignmentOut)
def assign_pricing_tier(
    user_id: int,
    payload: AssignPricingTierRequest,
    admin=Depends(require_admin),
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if user.role == UserRole.USER:
        raise HTTPException(status_code=400, detail="Pricing tiers apply to resellers only")
    if payload.custom_default_markup is not None and payload.tier != PricingTier.CUSTOM:
        raise HTTPException(status_code=400, detail="A custom default markup requires the CUSTOM tier")
    if payload.custom_default_markup is not None and payload.custom_default_markup < 0:
        raise HTTPException(status_code=400, detail="Markup value cannot be negative")

    assignment = db.query(UserPricingTier).filter(UserPricingTier.user_id == user_id).first()
    if not assignment:
        assignment = UserPricingTier(user_id=user_id)
        db.add(assignment)
    assignment.tier = payload.tier
    assignment.is_active = True
    assignment.custom_pricing = (
        {"default_markup": str(payload.custom_default_markup)}
        if payload.custom_default_markup is not None
        else None
    )
    db.commit()
    return {
        "user_id": user_id,
        "tier": assignment.tier,
        "custom_pricing": assignment.custom_pricing,
        "is_active": assignment.is_active,
    }
