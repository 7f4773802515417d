from sqlalchemy import Column, Integer, Numeric, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.base import TimestampMixin


class BillingConfig(Base, TimestampMixin):
    __tablename__ = "billing_configs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    auto_recharge = Column(Boolean, nullable=False, default=False)
    auto_recharge_amount = Column(Numeric(14, 4), nullable=False, default=0)
    auto_recharge_threshold = Column(Numeric(14, 4), nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    user = relationship("User", back_populates="billing_config")
