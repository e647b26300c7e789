from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from dispensary.core.database import Base

ORDER_STATUSES = ("pending", "confirmed", "preparing", "ready", "completed", "cancelled")
FULFILLMENT_TYPES = ("pickup", "delivery")


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, index=True, nullable=False)
    order_number = Column(String(50), unique=True, nullable=False)

    # pending -> confirmed -> preparing -> ready -> completed | cancelled
    status = Column(String(16), default="pending", nullable=False)
    fulfillment_type = Column(String(16), nullable=False)  # pickup | delivery
    total_price = Column(Numeric(10, 2), nullable=False)

    estimated_ready_time = Column(DateTime, nullable=True)
    actual_ready_time = Column(DateTime, nullable=True)
    delivery_address = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    order_items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")
