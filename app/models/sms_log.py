from sqlalchemy import Column, Integer, Numeric, String, ForeignKey, DateTime, JSON, Index
from app.core.database import Base
from app.models.base import utcnow


class SmsLog(Base):
    """Send record written by the SMS sending service; read here for usage stats."""

    __tablename__ = "sms_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    sender_id = Column(String(16), nullable=True)
    recipients = Column(JSON, nullable=False, default=list)
    cost = Column(Numeric(14, 4), nullable=True)
    sent_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


Index("ix_sms_logs_user_sent", SmsLog.user_id, SmsLog.sent_at)
