from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from dispensary.core.database import get_db
from dispensary.core.formatting import iso
from dispensary.deps import get_current_user
from dispensary.models.appointment import Appointment
from dispensary.models.user import User
from dispensary.services import appointments as appointment_service

router = APIRouter(prefix="/api/appointments", tags=["appointments"])


class AppointmentCreate(BaseModel):
    appointment_time: datetime
    consultation_type: str = Field(..., pattern="^(initial_consultation|follow_up|product_recommendation)$")
    notes: Optional[str] = Field(default=None, max_length=2000)


def _appointment_to_dict(a: Appointment) -> dict:
    return {
        "id": a.id,
        "user_id": a.user_id,
        "appointment_number": a.appointment_number,
        "doctor_name": a.doctor_name,
        "appointment_time": iso(a.appointment_time),
        "duration": a.duration,
        "status": a.status,
        "consultation_type": a.consultation_type,
        "notes": a.notes,
        "created_at": iso(a.created_at),
    }


@router.get("")
def list_appointments(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return [_appointment_to_dict(a) for a in appointment_service.list_user_appointments(db, user.id)]


@router.get("/slots")
def get_available_slots(day: date = Query(..., alias="date")):
    return [iso(slot) for slot in appointment_service.available_slots(day)]


@router.post("", status_code=201)
def create_appointment(
    payload: AppointmentCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    appointment = appointment_service.create_appointment(
        db,
        user.id,
        payload.appointment_time,
        payload.consultation_type,
        notes=payload.notes,
    )
    return {
        "appointment_id": appointment.id,
        "appointment_number": appointment.appointment_number,
    }
