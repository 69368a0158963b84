from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

import casework.models  # noqa: F401  (register all tables on Base.metadata)
from casework.db.base import Base
from casework.db.session import SessionLocal, engine
from casework.models.cases import Appointment, Case, CaseAssignment, Task
from casework.models.security import Office, User


def init_db(seed: bool = True) -> None:
    """
    Create tables and, when `seed` is set and the store is empty, add a small
    deterministic data set covering every role and the main access paths.
    """

    Base.metadata.create_all(bind=engine)

    if not seed:
        return

    with SessionLocal() as db:
        if _has_seed_data(db):
            return
        seed_demo_data(db)


def _has_seed_data(db: Session) -> bool:
    return db.execute(select(Office.id).limit(1)).first() is not None


def seed_demo_data(db: Session) -> None:
    # Offices
    centro = Office(name="Centro", code="CEN", address="Av. Juarez 100")
    norte = Office(name="Norte", code="NTE", address="Blvd. Norte 250")
    db.add_all([centro, norte])
    db.flush()

    # Staff (one per role) + a client
    admin = User(first_name="Ana", last_name="Admin", email="ana.admin@example.com", role="admin")
    manager = User(
        first_name="Mario",
        last_name="Gerente",
        email="mario.gerente@example.com",
        role="office_manager",
        office_id=centro.id,
    )
    lawyer = User(
        first_name="Laura",
        last_name="Abogada",
        email="laura.abogada@example.com",
        role="lawyer",
        office_id=centro.id,
        department="Legal",
    )
    psychologist = User(
        first_name="Pablo",
        last_name="Psicologo",
        email="pablo.psicologo@example.com",
        role="psychologist",
        office_id=centro.id,
        department="Psychology",
    )
    receptionist = User(
        first_name="Rosa",
        last_name="Recepcion",
        email="rosa.recepcion@example.com",
        role="receptionist",
        office_id=centro.id,
    )
    coordinator = User(
        first_name="Elena",
        last_name="Eventos",
        email="elena.eventos@example.com",
        role="event_coordinator",
        office_id=norte.id,
    )
    unassigned = User(
        first_name="Sergio",
        last_name="SinOficina",
        email="sergio.sinoficina@example.com",
        role="lawyer",
        department="Legal",
    )
    client = User(first_name="Carla", last_name="Cliente", email="carla.cliente@example.com", role="client")
    db.add_all([admin, manager, lawyer, psychologist, receptionist, coordinator, unassigned, client])
    db.flush()

    # Cases
    legal_centro = Case(
        client_id=client.id,
        office_id=centro.id,
        title="Custodia - Familia Perez",
        category="Legal",
        primary_staff_id=lawyer.id,
    )
    psych_centro = Case(
        client_id=client.id,
        office_id=centro.id,
        title="Terapia familiar",
        category="Psychology",
        primary_staff_id=psychologist.id,
    )
    civil_norte = Case(
        client_id=client.id,
        office_id=norte.id,
        title="Pension alimenticia",
        category="Civil",
    )
    db.add_all([legal_centro, psych_centro, civil_norte])
    db.flush()

    # Appointments
    db.add_all(
        [
            Appointment(
                case_id=legal_centro.id,
                staff_id=lawyer.id,
                title="Consulta legal inicial",
                start_time=datetime(2026, 1, 12, 10, 0),
                end_time=datetime(2026, 1, 12, 11, 0),
                department="Legal",
            ),
            Appointment(
                case_id=psych_centro.id,
                staff_id=psychologist.id,
                title="Sesion de terapia",
                start_time=datetime(2026, 1, 13, 16, 0),
                end_time=datetime(2026, 1, 13, 17, 0),
                department="Psychology",
            ),
            Appointment(
                case_id=civil_norte.id,
                staff_id=coordinator.id,
                title="Revision de documentos",
                start_time=datetime(2026, 1, 14, 9, 0),
                end_time=datetime(2026, 1, 14, 9, 30),
                department="Civil",
            ),
        ]
    )

    # Tasks: the receptionist's task on the Norte case is the only thing
    # that gives her access to it.
    db.add_all(
        [
            Task(case_id=legal_centro.id, assigned_to_id=lawyer.id, title="Preparar demanda", due_date=date(2026, 2, 1)),
            Task(case_id=civil_norte.id, assigned_to_id=receptionist.id, title="Llamar al cliente"),
            Task(case_id=psych_centro.id, assigned_to_id=None, title="Agendar seguimiento"),
        ]
    )

    # Legacy explicit grant
    db.add(CaseAssignment(user_id=psychologist.id, case_id=civil_norte.id))

    db.commit()
