"""Conversion of upstream provider credits into reseller wallet credits."""

import enum
import logging
import secrets
from datetime import datetime
from decimal import Decimal

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models import BillingConfig, LedgerType, MarkupRule, MarkupType, WalletTransaction
from app.services.arkesel import ArkeselClient
from app.services.pricing import DefaultMarkupPolicy, get_default_markup, round_price
from app.services.wallet import credit_wallet, lock_wallet


logger = logging.getLogger(__name__)

DISTRIBUTION_REFERENCE_PREFIX = "DIST_"


class DistributionType(str, enum.Enum):
    AUTOMATIC = "AUTOMATIC"
    MANUAL = "MANUAL"


def _top_active_rule(db: Session, user_id: int) -> MarkupRule | None:
    return (
        db.query(MarkupRule)
        .filter(MarkupRule.user_id == user_id, MarkupRule.is_active.is_(True))
        .order_by(MarkupRule.priority.desc(), MarkupRule.id.asc())
        .first()
    )


def convert_upstream_credits(upstream_credits: Decimal, markup: Decimal, markup_type: MarkupType) -> Decimal:
    """Inverse of the client markup: how many wallet credits the upstream credits buy.

    Results are clamped at zero, so a markup above 100% or a fixed amount
    larger than the credits yields nothing rather than a negative credit.
    """
    upstream_credits = Decimal(upstream_credits)
    markup = Decimal(markup)
    if markup_type == MarkupType.PERCENTAGE:
        credits = upstream_credits * (1 - markup / 100)
    elif markup_type == MarkupType.FIXED_AMOUNT:
        credits = upstream_credits - markup
    elif markup_type == MarkupType.TIERED:
        if markup <= 0:
            raise HTTPException(status_code=400, detail="Tiered markup multiplier must be greater than zero")
        credits = upstream_credits / markup
    else:
        raise ValueError(f"Unsupported markup type: {markup_type}")
    return round_price(max(Decimal("0"), credits))


def distribute_balance(
    db: Session,
    user_id: int,
    upstream_credits: Decimal,
    distribution_type: DistributionType = DistributionType.AUTOMATIC,
    *,
    policy: DefaultMarkupPolicy | None = None,
) -> dict:
    upstream_credits = Decimal(str(upstream_credits))
    if upstream_credits <= 0:
        raise HTTPException(status_code=400, detail="Valid upstream credits amount is required")
    distribution_type = DistributionType(distribution_type)

    rule = _top_active_rule(db, user_id)
    if rule is not None:
        markup, markup_type = Decimal(rule.markup_value), MarkupType(rule.markup_type)
    else:
        markup, markup_type = get_default_markup(db, user_id, policy), MarkupType.PERCENTAGE

    reseller_credits = convert_upstream_credits(upstream_credits, markup, markup_type)
    conversion_rate = round_price(reseller_credits / upstream_credits)
    reference = f"{DISTRIBUTION_REFERENCE_PREFIX}{secrets.token_hex(8)}"
    details = {
        "upstream_credits": str(upstream_credits),
        "distribution_type": distribution_type.value,
        "conversion_rate": str(conversion_rate),
        "markup": str(markup),
        "markup_type": markup_type.value,
        "markup_rule_id": rule.id if rule is not None else None,
    }

    try:
        wallet = lock_wallet(db, user_id)
        entry = credit_wallet(
            db,
            wallet,
            reseller_credits,
            reference,
            f"Balance distribution: {upstream_credits} upstream credits converted to {reseller_credits} wallet credits",
            details,
        )
        db.commit()
    except HTTPException:
        db.rollback()
        raise
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Balance distribution failed user_id=%s upstream_credits=%s", user_id, upstream_credits)
        raise HTTPException(status_code=500, detail="Failed to distribute balance")
    db.refresh(entry)

    logger.info(
        "Distributed balance user_id=%s type=%s upstream=%s reseller=%s rate=%s reference=%s",
        user_id,
        distribution_type.value,
        upstream_credits,
        reseller_credits,
        conversion_rate,
        reference,
    )
    return {
        "upstream_credits": upstream_credits,
        "reseller_credits": reseller_credits,
        "conversion_rate": conversion_rate,
        "transaction": entry,
    }


def sync_upstream_balance(client: ArkeselClient | None = None) -> Decimal:
    client = client or ArkeselClient()
    return client.get_balance()


def get_billing_config(db: Session, user_id: int) -> BillingConfig | None:
    return db.query(BillingConfig).filter(BillingConfig.user_id == user_id).first()


def upsert_billing_config(
    db: Session,
    user_id: int,
    *,
    auto_recharge: bool,
    auto_recharge_amount: Decimal,
    auto_recharge_threshold: Decimal,
) -> BillingConfig:
    if Decimal(auto_recharge_amount) < 0 or Decimal(auto_recharge_threshold) < 0:
        raise HTTPException(status_code=400, detail="Auto-recharge amounts cannot be negative")
    if auto_recharge and Decimal(auto_recharge_amount) <= 0:
        raise HTTPException(status_code=400, detail="Auto-recharge amount must be greater than zero")
    config = get_billing_config(db, user_id)
    if config is None:
        config = BillingConfig(user_id=user_id)
        db.add(config)
    config.auto_recharge = auto_recharge
    config.auto_recharge_amount = Decimal(auto_recharge_amount)
    config.auto_recharge_threshold = Decimal(auto_recharge_threshold)
    db.commit()
    db.refresh(config)
    return config


def auto_distribute_balance(
    db: Session,
    user_id: int,
    client: ArkeselClient | None = None,
    *,
    policy: DefaultMarkupPolicy | None = None,
) -> dict:
    config = get_billing_config(db, user_id)
    if config is None or not config.auto_recharge or not config.is_active:
        logger.info("Auto-distribution skipped user_id=%s reason=disabled", user_id)
        return {"performed": False, "reason": "Auto-distribution not enabled"}

    upstream_balance = sync_upstream_balance(client)
    if upstream_balance < Decimal(config.auto_recharge_threshold):
        logger.info(
            "Auto-distribution skipped user_id=%s reason=below_threshold balance=%s threshold=%s",
            user_id,
            upstream_balance,
            config.auto_recharge_threshold,
        )
        return {
            "performed": False,
            "reason": "Balance below threshold",
            "upstream_balance": upstream_balance,
        }

    result = distribute_balance(
        db,
        user_id,
        Decimal(config.auto_recharge_amount),
        DistributionType.AUTOMATIC,
        policy=policy,
    )
    return {"performed": True, "upstream_balance": upstream_balance, **result}


def get_distribution_history(
    db: Session,
    user_id: int,
    *,
    page: int = 1,
    limit: int = 10,
    start: datetime | None = None,
    end: datetime | None = None,
) -> dict:
    if page < 1:
        raise HTTPException(status_code=400, detail="page must be >= 1")
    if limit < 1 or limit > 100:
        raise HTTPException(status_code=400, detail="limit must be between 1 and 100")

    query = db.query(WalletTransaction).filter(
        WalletTransaction.user_id == user_id,
        WalletTransaction.entry_type == LedgerType.CREDIT,
        WalletTransaction.reference.startswith(DISTRIBUTION_REFERENCE_PREFIX),
    )
    if start is not None:
        query = query.filter(WalletTransaction.created_at >= start)
    if end is not None:
        query = query.filter(WalletTransaction.created_at <= end)

    total = query.count()
    items = (
        query.order_by(WalletTransaction.created_at.desc(), WalletTransaction.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "items": items,
        "total": total,
        "page": page,
        "limit": limit,
        "pages": (total + limit - 1) // limit,
    }
