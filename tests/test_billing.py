from decimal import Decimal

import pytest
from fastapi import HTTPException

from app.models import LedgerType, MarkupRule, MarkupType, ProfitTransaction, Wallet, WalletTransaction
from app.services.billing import bill_sms_send
from app.services.wallet import credit_wallet, lock_wallet


def _fund(db, user, amount):
    wallet = lock_wallet(db, user.id)
    credit_wallet(db, wallet, Decimal(amount), f"FUND_{user.id}", "Test funding")
    db.commit()


def _markup(db, user, value="20"):
    db.add(
        MarkupRule(
            user_id=user.id,
            name="billing",
            markup_type=MarkupType.PERCENTAGE,
            markup_value=Decimal(value),
            priority=1,
        )
    )
    db.commit()


def test_bill_sms_send_debits_wallet_and_records_profit(db, reseller):
    _markup(db, reseller)
    _fund(db, reseller, "10")

    out = bill_sms_send(db, reseller.id, 500, country_code="GH", base_cost=Decimal("0.01"), reference="SMS_TEST")

    assert out["pricing"].client_price == Decimal("0.012")
    entry = out["transaction"]
    assert entry.entry_type == LedgerType.DEBIT
    assert entry.amount == Decimal("6")
    assert entry.balance_after == Decimal("4")
    assert entry.reference == "SMS_TEST"

    profit = out["profit_transaction"]
    assert profit.transaction_type == "SMS"
    assert profit.transaction_id == "SMS_TEST"
    assert profit.client_charge == Decimal("6")
    assert profit.base_cost == Decimal("5")
    assert profit.profit == Decimal("1")
    assert profit.country_code == "GH"

    db.expire_all()
    assert db.query(Wallet).filter(Wallet.user_id == reseller.id).one().balance == Decimal("4")


def test_bill_sms_send_insufficient_balance_writes_nothing(db, reseller):
    _markup(db, reseller)
    _fund(db, reseller, "1")

    with pytest.raises(HTTPException) as exc:
        bill_sms_send(db, reseller.id, 500, base_cost=Decimal("0.01"))
    assert exc.value.status_code == 400
    assert exc.value.detail == "Insufficient balance"
    assert db.query(ProfitTransaction).count() == 0
    assert db.query(WalletTransaction).filter(WalletTransaction.entry_type == LedgerType.DEBIT).count() == 0


def test_bill_sms_send_locked_wallet(db, reseller):
    _fund(db, reseller, "10")
    wallet = lock_wallet(db, reseller.id)
    wallet.is_locked = True
    db.commit()

    with pytest.raises(HTTPException) as exc:
        bill_sms_send(db, reseller.id, 1)
    assert exc.value.status_code == 423


def test_bill_sms_send_rejects_bad_volume(db, reseller):
    with pytest.raises(HTTPException) as exc:
        bill_sms_send(db, reseller.id, 0)
    assert exc.value.status_code == 400
