"""
Pytest fixtures for the test suite.

Data-layer and engine tests use an in-memory SQLite engine and a session that
rolls back after each test. API tests use a StaticPool engine shared with the
TestClient threads, seeded with the demo data set.
"""
from __future__ import annotations

from itertools import count
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import casework.models  # noqa: F401  (register all tables)
from casework.db import filters as _filters  # noqa: F401  (register SQLAlchemy filters)
from casework.models.cases import Appointment, Case, CaseAssignment, Task
from casework.models.security import Office, User
from casework.security.context import Caller
from casework.security.roles import Role


TEST_DB_URL = "sqlite:///:memory:"
REPO_ROOT = Path(__file__).resolve().parents[1]


@pytest.fixture
def engine():
    """Create a fresh in-memory SQLite engine for each test."""
    return create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        echo=False,
    )


@pytest.fixture
def tables(engine):
    """Create all ORM tables on the test engine."""
    from casework.db.base import Base
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def db_session(tables):
    """
    Provide a Session bound to the test DB; roll back after each test.

    The transaction is rolled back so the next test gets a clean state.
    """
    connection = tables.connect()
    transaction = connection.begin()
    TestSession = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        class_=Session,
    )
    session = TestSession()
    yield session
    session.close()
    transaction.rollback()
    connection.close()


class Factory:
    """Small builders for the access tests. Every object is flushed so it has an id."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self._seq = count(1)
        self._client: User | None = None

    def _add(self, obj):
        self.db.add(obj)
        self.db.flush()
        return obj

    def office(self, name: str | None = None) -> Office:
        n = next(self._seq)
        return self._add(Office(name=name or f"Office {n}", code=f"O{n}"))

    def user(
        self,
        role: str = "lawyer",
        office: Office | None = None,
        department: str | None = None,
        is_active: bool = True,
    ) -> User:
        n = next(self._seq)
        return self._add(
            User(
                first_name=f"User{n}",
                last_name="Test",
                email=f"user{n}@example.com",
                role=role,
                office_id=office.id if office else None,
                department=department,
                is_active=is_active,
            )
        )

    def case(self, office: Office, department: str = "Legal", primary_staff: User | None = None) -> Case:
        if self._client is None:
            self._client = self.user(role="client")
        return self._add(
            Case(
                client_id=self._client.id,
                office_id=office.id,
                title="Case",
                category=department,
                primary_staff_id=primary_staff.id if primary_staff else None,
            )
        )

    def appointment(self, case: Case, staff: User, department: str = "Legal") -> Appointment:
        from datetime import datetime

        return self._add(
            Appointment(
                case_id=case.id,
                staff_id=staff.id,
                title="Appointment",
                start_time=datetime(2026, 3, 2, 10, 0),
                end_time=datetime(2026, 3, 2, 11, 0),
                department=department,
            )
        )

    def task(self, case: Case, assignee: User | None = None, deleted: bool = False) -> Task:
        from datetime import datetime

        return self._add(
            Task(
                case_id=case.id,
                assigned_to_id=assignee.id if assignee else None,
                title="Task",
                deleted_at=datetime(2026, 1, 1) if deleted else None,
            )
        )

    def assign(self, user: User, case: Case) -> CaseAssignment:
        return self._add(CaseAssignment(user_id=user.id, case_id=case.id))


@pytest.fixture
def factory(db_session) -> Factory:
    return Factory(db_session)


def caller_for(user: User, **overrides) -> Caller:
    """Build the Caller the identity resolver would produce for `user`."""
    values = {
        "id": user.id,
        "role": Role(user.role),
        "office_id": user.office_id,
        "department": user.department,
    }
    values.update(overrides)
    return Caller(**values)


# ---- API fixtures ---------------------------------------------------------------------


@pytest.fixture
def api_engine():
    return create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture
def api_sessionmaker(api_engine):
    from casework.db.base import Base
    from casework.db.init_db import seed_demo_data

    Base.metadata.create_all(bind=api_engine)
    factory = sessionmaker(bind=api_engine, autocommit=False, autoflush=False, class_=Session)
    with factory() as db:
        seed_demo_data(db)
    return factory


@pytest.fixture
def app(api_sessionmaker):
    from casework.main import create_app
    from casework.security.config import load_security_config

    application = create_app()
    # TestClient is used without a `with` block, so lifespan does not run.
    application.state.security_config = load_security_config(REPO_ROOT / "config" / "security_config.yaml")
    application.state.session_factory = api_sessionmaker
    return application


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def seeded(api_sessionmaker) -> dict[str, int]:
    """Ids of the demo rows, keyed by a short name."""
    with api_sessionmaker() as db:
        users = {u.email.split(".")[0]: u.id for u in db.scalars(select(User))}
        cases = {c.title: c.id for c in db.scalars(select(Case))}
        tasks = {t.title: t.id for t in db.scalars(select(Task))}
        appointments = {a.title: a.id for a in db.scalars(select(Appointment))}
    return {
        "admin": users["ana"],
        "manager": users["mario"],
        "lawyer": users["laura"],
        "psychologist": users["pablo"],
        "receptionist": users["rosa"],
        "coordinator": users["elena"],
        "no_office": users["sergio"],
        "client": users["carla"],
        "legal_case": cases["Custodia - Familia Perez"],
        "psych_case": cases["Terapia familiar"],
        "norte_case": cases["Pension alimenticia"],
        "lawyer_task": tasks["Preparar demanda"],
        "receptionist_task": tasks["Llamar al cliente"],
        "unassigned_task": tasks["Agendar seguimiento"],
        "legal_appt": appointments["Consulta legal inicial"],
        "psych_appt": appointments["Sesion de terapia"],
        "norte_appt": appointments["Revision de documentos"],
    }


def auth(user_id: int) -> dict[str, str]:
    return {"Authorization": f"Bearer {user_id}"}
