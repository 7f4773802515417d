from datetime import date, datetime, time, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import require_reseller
from app.middlewares.rate_limit import limiter
from app.models import User
from app.schemas.balance import (
    AutoDistributionOut,
    AutoRechargeConfig,
    AutoRechargeConfigOut,
    DistributeBalanceRequest,
    DistributionHistoryOut,
    DistributionOut,
    UpstreamBalanceOut,
)
from app.services.arkesel import ArkeselApiError
from app.services.distribution import (
    auto_distribute_balance,
    distribute_balance,
    get_billing_config,
    get_distribution_history,
    sync_upstream_balance,
    upsert_billing_config,
)

router = APIRouter()


def _provider_unavailable(exc: ArkeselApiError) -> HTTPException:
    return HTTPException(status_code=503, detail=f"SMS provider unavailable: {exc.message}")


def _as_utc_start(d: date) -> datetime:
    return datetime.combine(d, time.min).replace(tzinfo=timezone.utc)


def _as_utc_end(d: date) -> datetime:
    return datetime.combine(d, time.max).replace(tzinfo=timezone.utc)


@router.post("/distribute", response_model=DistributionOut)
@limiter.limit("10/minute")
def distribute(
    request: Request,
    payload: DistributeBalanceRequest,
    user: User = Depends(require_reseller),
    db: Session = Depends(get_db),
):
    return distribute_balance(db, user.id, payload.upstream_credits, payload.distribution_type)


@router.post("/auto-distribute", response_model=AutoDistributionOut)
@limiter.limit("10/minute")
def auto_distribute(request: Request, user: User = Depends(require_reseller), db: Session = Depends(get_db)):
    try:
        return auto_distribute_balance(db, user.id)
    except ArkeselApiError as exc:
        raise _provider_unavailable(exc)


@router.get("/upstream", response_model=UpstreamBalanceOut)
def upstream_balance(user: User = Depends(require_reseller)):
    try:
        balance = sync_upstream_balance()
    except ArkeselApiError as exc:
        raise _provider_unavailable(exc)
    return {"balance": balance, "synced_at": datetime.now(timezone.utc).isoformat()}


@router.get("/distributions", response_model=DistributionHistoryOut)
def distributions(
    user: User = Depends(require_reseller),
    db: Session = Depends(get_db),
    page: int = 1,
    limit: int = 10,
    from_date: Optional[date] = Query(default=None, alias="from"),
    to_date: Optional[date] = Query(default=None, alias="to"),
):
    return get_distribution_history(
        db,
        user.id,
        page=page,
        limit=limit,
        start=_as_utc_start(from_date) if from_date else None,
        end=_as_utc_end(to_date) if to_date else None,
    )


@router.get("/auto-recharge", response_model=AutoRechargeConfigOut)
def get_auto_recharge(user: User = Depends(require_reseller), db: Session = Depends(get_db)):
    config = get_billing_config(db, user.id)
    if config is None:
        return AutoRechargeConfigOut()
    return config


@router.put("/auto-recharge", response_model=AutoRechargeConfigOut)
def put_auto_recharge(payload: AutoRechargeConfig, user: User = Depends(require_reseller), db: Session = Depends(get_db)):
    return upsert_billing_config(
        db,
        user.id,
        auto_recharge=payload.auto_recharge,
        auto_recharge_amount=payload.auto_recharge_amount,
        auto_recharge_threshold=payload.auto_recharge_threshold,
    )
