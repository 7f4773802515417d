import enum
from sqlalchemy import Column, Integer, String, Boolean, Enum, Index
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.base import TimestampMixin


class UserRole(str, enum.Enum):
    USER = "user"
    RESELLER = "reseller"
    ADMIN = "admin"


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.USER)
    is_active = Column(Boolean, default=True, nullable=False)

    wallet = relationship("Wallet", back_populates="user", uselist=False)
    pricing_tier = relationship("UserPricingTier", back_populates="user", uselist=False)
    billing_config = relationship("BillingConfig", back_populates="user", uselist=False)
    markup_rules = relationship("MarkupRule", back_populates="user")


Index("ix_users_role_active", User.role, User.is_active)
