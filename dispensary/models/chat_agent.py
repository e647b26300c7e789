from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from dispensary.core.database import Base

AGENT_STATUSES = ("online", "offline", "away")


class ChatAgent(Base):
    __tablename__ = "chat_agents"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, unique=True, nullable=False)
    display_name = Column(String(255), nullable=False)
    status = Column(String(16), default="offline", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
