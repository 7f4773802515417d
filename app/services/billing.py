import logging
import secrets
from decimal import Decimal

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.services.pricing import DefaultMarkupPolicy, calculate_pricing
from app.services.profit import build_profit_transaction
from app.services.wallet import debit_wallet, lock_wallet


logger = logging.getLogger(__name__)

SMS_TRANSACTION_TYPE = "SMS"


def bill_sms_send(
    db: Session,
    user_id: int,
    volume: int,
    *,
    country_code: str | None = None,
    sms_type: str | None = None,
    base_cost: Decimal | None = None,
    reference: str | None = None,
    policy: DefaultMarkupPolicy | None = None,
) -> dict:
    """Charge a reseller's wallet for ``volume`` messages.

    The debit, its wallet transaction and the profit ledger row are committed
    together; on any failure none of them is written.
    """
    if volume <= 0:
        raise HTTPException(status_code=400, detail="Valid volume is required")

    pricing = calculate_pricing(db, user_id, volume, country_code, sms_type, base_cost, policy=policy)
    total_charge = pricing.client_price * volume
    total_cost = pricing.base_cost * volume
    reference = reference or f"SMS_{secrets.token_hex(8)}"

    try:
        wallet = lock_wallet(db, user_id)
        entry = debit_wallet(
            db,
            wallet,
            total_charge,
            reference,
            f"SMS charge: {volume} message(s) at {pricing.client_price}",
            {
                "volume": volume,
                "unit_price": str(pricing.client_price),
                "markup_type": pricing.markup_type.value,
                "country_code": country_code,
            },
        )
        profit_entry = build_profit_transaction(
            user_id=user_id,
            transaction_id=reference,
            transaction_type=SMS_TRANSACTION_TYPE,
            base_cost=total_cost,
            client_charge=total_charge,
            markup_applied=pricing.markup,
            volume=volume,
            country_code=country_code,
        )
        db.add(profit_entry)
        db.commit()
    except HTTPException:
        db.rollback()
        raise
    except SQLAlchemyError:
        db.rollback()
        logger.exception("SMS billing failed user_id=%s volume=%s reference=%s", user_id, volume, reference)
        raise HTTPException(status_code=500, detail="Failed to charge SMS cost")
    db.refresh(entry)
    db.refresh(profit_entry)

    logger.info("Charged user_id=%s volume=%s amount=%s reference=%s", user_id, volume, total_charge, reference)
    return {"pricing": pricing, "transaction": entry, "profit_transaction": profit_entry}
