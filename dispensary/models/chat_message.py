from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from dispensary.core.database import Base

SYSTEM_SENDER_ID = 0
SENDER_TYPES = ("customer", "agent")


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id = Column(Integer, primary_key=True)
    conversation_id = Column(Integer, ForeignKey("chat_conversations.id"), index=True, nullable=False)
    sender_id = Column(Integer, nullable=False)  # 0 = resposta automática
    sender_type = Column(String(16), nullable=False)  # customer | agent
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    conversation = relationship("ChatConversation", back_populates="messages")
