from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text

from dispensary.core.database import Base


class UserPreference(Base):
    __tablename__ = "user_preferences"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, unique=True, nullable=False)
    favorite_products = Column(Text, nullable=True)  # JSON array de product ids
    preferred_fulfillment_type = Column(String(16), default="pickup", nullable=True)
    notification_preferences = Column(Text, nullable=True)  # JSON object

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
