from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from dispensary.core.database import Base

NOTIFICATION_TYPES = (
    "order_ready",
    "order_shipped",
    "appointment_reminder",
    "appointment_confirmed",
    "new_blog_post",
    "promotion",
)


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, index=True, nullable=False)
    type = Column(String(32), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    related_order_id = Column(Integer, nullable=True)
    related_appointment_id = Column(Integer, nullable=True)
    read = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
