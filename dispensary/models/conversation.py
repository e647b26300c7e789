from datetime import datetime

from sqlalchemy import Column, DateTime, Index, Integer, String
from sqlalchemy.orm import relationship

from dispensary.core.database import Base

CONVERSATION_STATUSES = ("waiting", "active", "closed")
OPEN_CONVERSATION_STATUSES = ("waiting", "active")


class ChatConversation(Base):
    __tablename__ = "chat_conversations"
    __table_args__ = (Index("ix_chat_conversations_user_status", "user_id", "status"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, index=True, nullable=False)
    agent_id = Column(Integer, nullable=True)

    # waiting (sem agente) -> active (com agente) -> closed (terminal)
    status = Column(String(16), default="waiting", nullable=False)
    subject = Column(String(255), nullable=True)

    started_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    closed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    messages = relationship("ChatMessage", back_populates="conversation", order_by="ChatMessage.id")
