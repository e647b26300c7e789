from __future__ import annotations

import logging
import time
from datetime import date, datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dispensary.core.errors import InternalError, ValidationError
from dispensary.models.appointment import CONSULTATION_TYPES, Appointment

logger = logging.getLogger(__name__)

DEFAULT_DOCTOR_NAME = "Dr. Cannabis Specialist"
DEFAULT_DURATION_MINUTES = 30
FIRST_SLOT_HOUR = 10
SLOTS_PER_DAY = 8


def list_user_appointments(db: Session, user_id: int) -> list[Appointment]:
    return (
        db.query(Appointment)
        .filter(Appointment.user_id == user_id)
        .order_by(Appointment.appointment_time.desc(), Appointment.id.desc())
        .all()
    )


def available_slots(day: date) -> list[datetime]:
    """Grade estática: oito horários de hora em hora a partir das 10h (sem checar conflitos)."""
    base = datetime(day.year, day.month, day.day, FIRST_SLOT_HOUR, 0, 0)
    return [base + timedelta(hours=offset) for offset in range(SLOTS_PER_DAY)]


def create_appointment(
    db: Session,
    user_id: int,
    appointment_time: datetime,
    consultation_type: str,
    notes: str | None = None,
) -> Appointment:
    if consultation_type not in CONSULTATION_TYPES:
        raise ValidationError(f"Invalid consultation type: {consultation_type}")

    appointment = Appointment(
        user_id=user_id,
        appointment_number=f"APT-{int(time.time() * 1000)}",
        doctor_name=DEFAULT_DOCTOR_NAME,
        appointment_time=appointment_time,
        duration=DEFAULT_DURATION_MINUTES,
        status="scheduled",
        consultation_type=consultation_type,
        notes=(notes or "").strip() or None,
    )
    db.add(appointment)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Appointment insert failed user_id=%s", user_id)
        raise InternalError("Failed to create appointment")
    db.refresh(appointment)
    logger.info(
        "Appointment created appointment_id=%s number=%s user_id=%s",
        appointment.id,
        appointment.appointment_number,
        user_id,
    )
    return appointment
