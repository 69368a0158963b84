from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict


class CaseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    client_id: int
    office_id: int
    title: str
    description: str | None
    category: str
    status: str
    primary_staff_id: int | None
    created_at: datetime


class CaseUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    status: str | None = None


class AppointmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    case_id: int
    staff_id: int
    title: str
    start_time: datetime
    end_time: datetime
    status: str
    department: str


class AppointmentUpdate(BaseModel):
    title: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    status: str | None = None


class TaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    case_id: int
    assigned_to_id: int | None
    title: str
    status: str
    due_date: date | None


class TaskUpdate(BaseModel):
    title: str | None = None
    status: str | None = None
    due_date: date | None = None
