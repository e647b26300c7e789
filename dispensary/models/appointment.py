from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text

from dispensary.core.database import Base

APPOINTMENT_STATUSES = ("scheduled", "confirmed", "completed", "cancelled", "no_show")
CONSULTATION_TYPES = ("initial_consultation", "follow_up", "product_recommendation")


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, index=True, nullable=False)
    appointment_number = Column(String(50), unique=True, nullable=False)
    doctor_name = Column(String(255), nullable=False)
    appointment_time = Column(DateTime, nullable=False)
    duration = Column(Integer, nullable=False)  # minutos
    status = Column(String(16), default="scheduled", nullable=False)
    consultation_type = Column(String(32), default="initial_consultation", nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
