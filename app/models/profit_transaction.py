from sqlalchemy import Column, Integer, String, Numeric, Index, ForeignKey, DateTime, func
from app.core.database import Base
from app.models.base import utcnow


class ProfitTransaction(Base):
    """One row per priced event. Rows are never updated once written."""

    __tablename__ = "profit_transactions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    transaction_id = Column(String(64), nullable=False)
    transaction_type = Column(String(32), nullable=False)
    base_cost = Column(Numeric(14, 4), nullable=False)
    client_charge = Column(Numeric(14, 4), nullable=False)
    profit = Column(Numeric(14, 4), nullable=False)
    markup_applied = Column(Numeric(14, 4), nullable=False)
    volume = Column(Integer, nullable=False)
    country_code = Column(String(8), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())


Index("ix_profit_transactions_user_created", ProfitTransaction.user_id, ProfitTransaction.created_at)
Index("ix_profit_transactions_type", ProfitTransaction.transaction_type)
