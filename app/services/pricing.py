from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Protocol

from fastapi import HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.models import MarkupRule, MarkupType, PricingTier, UserPricingTier


PRICE_QUANT = Decimal("0.0001")
FALLBACK_MARKUP = Decimal("20")


def round_price(value: Decimal) -> Decimal:
    return Decimal(value).quantize(PRICE_QUANT, rounding=ROUND_HALF_UP)


class DefaultMarkupPolicy(Protocol):
    def default_markup_for(self, tier: PricingTier | None) -> Decimal: ...


class TierMarkupPolicy:
    """Percentage markup applied when none of a reseller's rules match."""

    TIER_MARKUPS = {
        PricingTier.BASIC: Decimal("15"),
        PricingTier.STANDARD: Decimal("20"),
        PricingTier.PREMIUM: Decimal("25"),
        PricingTier.ENTERPRISE: Decimal("30"),
        PricingTier.CUSTOM: Decimal("20"),
    }

    def __init__(self, overrides: dict | None = None):
        self.markups = dict(self.TIER_MARKUPS)
        if overrides:
            self.markups.update(overrides)

    def default_markup_for(self, tier: PricingTier | None) -> Decimal:
        # Resellers without a tier assignment are billed as BASIC.
        if tier is None:
            tier = PricingTier.BASIC
        return self.markups.get(tier, FALLBACK_MARKUP)


default_policy = TierMarkupPolicy()


@dataclass(frozen=True)
class PricingResult:
    base_cost: Decimal
    markup: Decimal
    markup_type: MarkupType
    client_price: Decimal
    profit: Decimal
    markup_rule: MarkupRule | None = None

    def as_dict(self) -> dict:
        rule = self.markup_rule
        return {
            "base_cost": self.base_cost,
            "markup": self.markup,
            "markup_type": self.markup_type.value,
            "client_price": self.client_price,
            "profit": self.profit,
            "markup_rule_id": rule.id if rule is not None else None,
            "markup_rule_name": rule.name if rule is not None else None,
        }


def get_default_markup(db: Session, user_id: int, policy: DefaultMarkupPolicy | None = None) -> Decimal:
    policy = policy or default_policy
    assignment = (
        db.query(UserPricingTier)
        .filter(UserPricingTier.user_id == user_id, UserPricingTier.is_active.is_(True))
        .first()
    )
    if assignment is not None and assignment.custom_pricing:
        custom = assignment.custom_pricing or {}
        value = custom.get("default_markup")
        return Decimal(str(value)) if value not in (None, "") else FALLBACK_MARKUP
    return policy.default_markup_for(assignment.tier if assignment is not None else None)


def find_applicable_rule(
    db: Session,
    user_id: int,
    volume: int,
    country_code: str | None = None,
    sms_type: str | None = None,
) -> MarkupRule | None:
    """Highest-priority active rule whose scope covers the request.

    A request without a country or SMS type is not narrowed on that field,
    so scoped rules are candidates too. Equal priorities fall back to the
    oldest rule (lowest id) so repeated calls always pick the same rule.
    """
    query = db.query(MarkupRule).filter(
        MarkupRule.user_id == user_id,
        MarkupRule.is_active.is_(True),
        or_(MarkupRule.min_volume <= volume, MarkupRule.min_volume == 0),
        or_(MarkupRule.max_volume >= volume, MarkupRule.max_volume.is_(None)),
    )
    if country_code:
        query = query.filter(or_(MarkupRule.country_code == country_code, MarkupRule.country_code.is_(None)))
    if sms_type:
        query = query.filter(or_(MarkupRule.sms_type == sms_type, MarkupRule.sms_type.is_(None)))
    return query.order_by(MarkupRule.priority.desc(), MarkupRule.id.asc()).first()


def apply_markup(base_cost: Decimal, markup: Decimal, markup_type: MarkupType) -> Decimal:
    base_cost = Decimal(base_cost)
    markup = Decimal(markup)
    if markup_type == MarkupType.PERCENTAGE:
        return base_cost * (1 + markup / 100)
    if markup_type == MarkupType.FIXED_AMOUNT:
        return base_cost + markup
    if markup_type == MarkupType.TIERED:
        return base_cost * markup
    raise ValueError(f"Unsupported markup type: {markup_type}")


def calculate_pricing(
    db: Session,
    user_id: int,
    volume: int,
    country_code: str | None = None,
    sms_type: str | None = None,
    base_cost: Decimal | None = None,
    *,
    policy: DefaultMarkupPolicy | None = None,
) -> PricingResult:
    if base_cost is None:
        base_cost = get_settings().default_sms_base_cost
    base_cost = Decimal(str(base_cost))

    rule = find_applicable_rule(db, user_id, volume, country_code, sms_type)
    if rule is not None:
        markup = Decimal(rule.markup_value)
        markup_type = MarkupType(rule.markup_type)
    else:
        markup = get_default_markup(db, user_id, policy)
        markup_type = MarkupType.PERCENTAGE

    client_price = round_price(apply_markup(base_cost, markup, markup_type))
    # Derived from the rounded price so client_price - base_cost == profit exactly.
    profit = round_price(client_price - base_cost)
    return PricingResult(
        base_cost=base_cost,
        markup=markup,
        markup_type=markup_type,
        client_price=client_price,
        profit=profit,
        markup_rule=rule,
    )


def calculate_bulk_pricing(
    db: Session,
    user_id: int,
    volumes: list[int],
    country_code: str | None = None,
    sms_type: str | None = None,
    *,
    policy: DefaultMarkupPolicy | None = None,
) -> dict:
    if not volumes:
        raise HTTPException(status_code=400, detail="Valid volumes array is required")
    if any(int(v) <= 0 for v in volumes):
        raise HTTPException(status_code=400, detail="Volumes must be greater than zero")

    items = []
    for volume in volumes:
        result = calculate_pricing(db, user_id, int(volume), country_code, sms_type, policy=policy)
        items.append({"volume": int(volume), **result.as_dict()})

    total_price = sum((item["client_price"] for item in items), Decimal("0"))
    return {
        "bulk_pricing": items,
        "total_volume": sum(int(v) for v in volumes),
        "average_price": round_price(total_price / len(items)),
    }
