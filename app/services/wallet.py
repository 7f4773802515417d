from decimal import Decimal
from sqlalchemy.orm import Session
from fastapi import HTTPException
from app.models import Wallet, WalletTransaction, LedgerType


def get_or_create_wallet(db: Session, user_id: int) -> Wallet:
    wallet = db.query(Wallet).filter(Wallet.user_id == user_id).first()
    if not wallet:
        wallet = Wallet(user_id=user_id, balance=0)
        db.add(wallet)
        db.commit()
        db.refresh(wallet)
    return wallet


def lock_wallet(db: Session, user_id: int) -> Wallet:
    """Load the wallet row with ``SELECT ... FOR UPDATE``.

    The lock is held until the caller commits or rolls back, so concurrent
    balance mutations for the same user are applied one after the other.
    """
    wallet = get_or_create_wallet(db, user_id)
    return (
        db.query(Wallet)
        .filter(Wallet.id == wallet.id)
        .with_for_update()
        .populate_existing()
        .one()
    )


def _entry(wallet: Wallet, amount: Decimal, entry_type: LedgerType, reference: str, description: str, details: dict | None) -> WalletTransaction:
    return WalletTransaction(
        wallet_id=wallet.id,
        user_id=wallet.user_id,
        amount=amount,
        balance_after=Decimal(wallet.balance),
        entry_type=entry_type,
        reference=reference,
        description=description,
        details=details,
    )


def credit_wallet(
    db: Session,
    wallet: Wallet,
    amount: Decimal,
    reference: str,
    description: str,
    details: dict | None = None,
) -> WalletTransaction:
    """Stage a credit on a locked wallet. The caller owns the commit."""
    if wallet.is_locked:
        raise HTTPException(status_code=423, detail="Wallet is locked")
    wallet.balance = Decimal(wallet.balance) + amount
    entry = _entry(wallet, amount, LedgerType.CREDIT, reference, description, details)
    db.add(entry)
    return entry


def debit_wallet(
    db: Session,
    wallet: Wallet,
    amount: Decimal,
    reference: str,
    description: str,
    details: dict | None = None,
) -> WalletTransaction:
    """Stage a debit on a locked wallet. The caller owns the commit."""
    if wallet.is_locked:
        raise HTTPException(status_code=423, detail="Wallet is locked")
    if Decimal(wallet.balance) < amount:
        raise HTTPException(status_code=400, detail="Insufficient balance")
    wallet.balance = Decimal(wallet.balance) - amount
    entry = _entry(wallet, amount, LedgerType.DEBIT, reference, description, details)
    db.add(entry)
    return entry
