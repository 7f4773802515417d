import enum
from sqlalchemy import Column, Integer, String, Numeric, Enum, Index, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.base import TimestampMixin


class MarkupType(str, enum.Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED_AMOUNT = "FIXED_AMOUNT"
    # markup_value is a direct multiplier of the base cost
    TIERED = "TIERED"


class RuleKind(str, enum.Enum):
    MARKUP = "MARKUP"
    VOLUME_TIER = "VOLUME_TIER"


class MarkupRule(Base, TimestampMixin):
    __tablename__ = "markup_rules"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(128), nullable=False)
    kind = Column(Enum(RuleKind), nullable=False, default=RuleKind.MARKUP)
    markup_type = Column(Enum(MarkupType), nullable=False)
    markup_value = Column(Numeric(14, 4), nullable=False)
    min_volume = Column(Integer, nullable=False, default=0)
    max_volume = Column(Integer, nullable=True)
    country_code = Column(String(8), nullable=True)
    sms_type = Column(String(32), nullable=True)
    priority = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    user = relationship("User", back_populates="markup_rules")


Index("ix_markup_rules_user_name", MarkupRule.user_id, MarkupRule.name, unique=True)
Index("ix_markup_rules_user_active", MarkupRule.user_id, MarkupRule.is_active)
Index("ix_markup_rules_priority", MarkupRule.priority)
