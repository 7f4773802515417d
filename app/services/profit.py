from datetime import datetime, timedelta, timezone
from decimal import Decimal

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models import ProfitTransaction


RECENT_TRANSACTIONS_LIMIT = 10
MAX_ANALYTICS_DAYS = 3650


def build_profit_transaction(
    *,
    user_id: int,
    transaction_id: str,
    transaction_type: str,
    base_cost: Decimal,
    client_charge: Decimal,
    markup_applied: Decimal,
    volume: int,
    country_code: str | None = None,
) -> ProfitTransaction:
    base_cost = Decimal(str(base_cost))
    client_charge = Decimal(str(client_charge))
    return ProfitTransaction(
        user_id=user_id,
        transaction_id=transaction_id,
        transaction_type=transaction_type,
        base_cost=base_cost,
        client_charge=client_charge,
        profit=client_charge - base_cost,
        markup_applied=Decimal(str(markup_applied)),
        volume=volume,
        country_code=country_code,
    )


def record_profit_transaction(db: Session, **fields) -> ProfitTransaction:
    entry = build_profit_transaction(**fields)
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


def get_profit_analytics(db: Session, user_id: int, days: int = 30) -> dict:
    if days < 1 or days > MAX_ANALYTICS_DAYS:
        raise HTTPException(status_code=400, detail=f"days must be between 1 and {MAX_ANALYTICS_DAYS}")
    since = datetime.now(timezone.utc) - timedelta(days=days)
    window = (ProfitTransaction.user_id == user_id, ProfitTransaction.created_at >= since)

    total_profit = db.query(func.sum(ProfitTransaction.profit)).filter(*window).scalar() or 0
    total_transactions = db.query(func.count(ProfitTransaction.id)).filter(*window).scalar() or 0
    by_type = (
        db.query(
            ProfitTransaction.transaction_type,
            func.sum(ProfitTransaction.profit),
            func.count(ProfitTransaction.id),
        )
        .filter(*window)
        .group_by(ProfitTransaction.transaction_type)
        .order_by(ProfitTransaction.transaction_type)
        .all()
    )
    recent = (
        db.query(ProfitTransaction)
        .filter(*window)
        .order_by(ProfitTransaction.created_at.desc(), ProfitTransaction.id.desc())
        .limit(RECENT_TRANSACTIONS_LIMIT)
        .all()
    )
    return {
        "period": f"{days} days",
        "total_profit": Decimal(str(total_profit)),
        "total_transactions": int(total_transactions),
        "profit_by_type": [
            {"type": tx_type, "profit": Decimal(str(profit or 0)), "count": int(count)}
            for tx_type, profit, count in by_type
        ],
        "recent_transactions": recent,
    }
