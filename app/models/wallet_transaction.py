import enum
from sqlalchemy import Column, Integer, ForeignKey, Numeric, String, Enum, Index, JSON
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.base import TimestampMixin


class LedgerType(str, enum.Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class WalletTransaction(Base, TimestampMixin):
    __tablename__ = "wallet_transactions"

    id = Column(Integer, primary_key=True, index=True)
    wallet_id = Column(Integer, ForeignKey("wallets.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    amount = Column(Numeric(14, 4), nullable=False)
    balance_after = Column(Numeric(14, 4), nullable=False)
    entry_type = Column(Enum(LedgerType), nullable=False)
    reference = Column(String(64), nullable=False, index=True)
    description = Column(String(255), nullable=False)
    # "metadata" is reserved on declarative classes.
    details = Column("metadata", JSON, nullable=True)

    wallet = relationship("Wallet", back_populates="transactions")


Index("ix_wallet_transactions_wallet_id_type", WalletTransaction.wallet_id, WalletTransaction.entry_type)
Index("ix_wallet_transactions_user_created", WalletTransaction.user_id, WalletTransaction.created_at)
