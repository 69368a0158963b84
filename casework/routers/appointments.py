from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from casework.db.session import get_db
from casework.models.cases import Appointment
from casework.schemas.cases import AppointmentOut, AppointmentUpdate

router = APIRouter(tags=["appointments"])


@router.get("/appointments", response_model=list[AppointmentOut])
def list_appointments(db: Session = Depends(get_db)) -> list[Appointment]:
    return list(db.scalars(select(Appointment).order_by(Appointment.start_time, Appointment.id)).all())


@router.get("/appointments/{id}", response_model=AppointmentOut)
def get_appointment(id: int, db: Session = Depends(get_db)) -> Appointment:
    return _load(db, id)


@router.patch("/appointments/{id}", response_model=AppointmentOut)
def update_appointment(id: int, payload: AppointmentUpdate, db: Session = Depends(get_db)) -> Appointment:
    appointment = _load(db, id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(appointment, field, value)
    db.commit()
    db.refresh(appointment)
    return appointment


def _load(db: Session, appointment_id: int) -> Appointment:
    appointment = db.scalars(select(Appointment).where(Appointment.id == appointment_id)).first()
    if appointment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Appointment not found")
    return appointment
