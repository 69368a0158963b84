"""
Read-only store access for the access engine.

Evaluators never see ORM objects: they receive small frozen snapshots so a
decision is a pure function of (caller, snapshot). Soft-deleted rows do not
resolve. Any SQLAlchemy failure is surfaced as ``StoreUnavailable``; nothing
here retries.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
import logging

from sqlalchemy import exists, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from casework.models.cases import Appointment, Case, CaseAssignment, Task
from casework.models.security import User
from casework.security.errors import StoreUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaseRef:
    id: int
    office_id: int
    department: str
    primary_staff_id: int | None


@dataclass(frozen=True)
class AppointmentRef:
    id: int
    case_id: int
    case_office_id: int
    department: str
    staff_id: int


@dataclass(frozen=True)
class TaskRef:
    id: int
    case_id: int
    case_office_id: int
    assigned_to_id: int | None


@dataclass(frozen=True)
class UserRef:
    id: int
    office_id: int | None


@contextmanager
def _reading(what: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Store read failed while loading %s: %s", what, type(exc).__name__)
        raise StoreUnavailable() from exc


class AccessStore:
    """Thin query wrapper over a Session. Holds no state besides the session."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def load_user(self, user_id: int) -> User | None:
        with _reading("user"):
            return self._db.execute(select(User).where(User.id == user_id)).scalar_one_or_none()

    def case(self, case_id: int) -> CaseRef | None:
        with _reading("case"):
            row = self._db.execute(
                select(Case.id, Case.office_id, Case.category, Case.primary_staff_id).where(
                    Case.id == case_id,
                    Case.deleted_at.is_(None),
                )
            ).first()
        if row is None:
            return None
        return CaseRef(id=row.id, office_id=row.office_id, department=row.category, primary_staff_id=row.primary_staff_id)

    def appointment(self, appointment_id: int) -> AppointmentRef | None:
        with _reading("appointment"):
            row = self._db.execute(
                select(
                    Appointment.id,
                    Appointment.case_id,
                    Appointment.department,
                    Appointment.staff_id,
                    Case.office_id,
                )
                .join(Case, Case.id == Appointment.case_id)
                .where(
                    Appointment.id == appointment_id,
                    Appointment.deleted_at.is_(None),
                    Case.deleted_at.is_(None),
                )
            ).first()
        if row is None:
            return None
        return AppointmentRef(
            id=row.id,
            case_id=row.case_id,
            case_office_id=row.office_id,
            department=row.department,
            staff_id=row.staff_id,
        )

    def task(self, task_id: int) -> TaskRef | None:
        with _reading("task"):
            row = self._db.execute(
                select(Task.id, Task.case_id, Task.assigned_to_id, Case.office_id)
                .join(Case, Case.id == Task.case_id)
                .where(
                    Task.id == task_id,
                    Task.deleted_at.is_(None),
                    Case.deleted_at.is_(None),
                )
            ).first()
        if row is None:
            return None
        return TaskRef(id=row.id, case_id=row.case_id, case_office_id=row.office_id, assigned_to_id=row.assigned_to_id)

    def user(self, user_id: int) -> UserRef | None:
        with _reading("user"):
            row = self._db.execute(select(User.id, User.office_id).where(User.id == user_id)).first()
        if row is None:
            return None
        return UserRef(id=row.id, office_id=row.office_id)

    def has_assigned_task(self, user_id: int, case_id: int) -> bool:
        """True if a non-deleted task on ``case_id`` is assigned to ``user_id``."""
        with _reading("task assignment"):
            return bool(
                self._db.scalar(
                    select(
                        exists().where(
                            Task.case_id == case_id,
                            Task.assigned_to_id == user_id,
                            Task.deleted_at.is_(None),
                        )
                    )
                )
            )

    def has_case_assignment(self, user_id: int, case_id: int) -> bool:
        with _reading("case assignment"):
            return bool(
                self._db.scalar(
                    select(
                        exists().where(
                            CaseAssignment.user_id == user_id,
                            CaseAssignment.case_id == case_id,
                        )
                    )
                )
            )
