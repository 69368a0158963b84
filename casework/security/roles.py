"""
Role table and role classifier.

Key ideas:
- ``Role`` is a closed enum; every member has exactly one ``RoleProfile``.
- A profile carries the hierarchy level (lower = more access) and the
  behavior class the access evaluators branch on.
- Unknown role keys are rejected with ``InvalidRole``. There is no fallback
  profile, so a new role cannot silently pick up another role's behavior.

The hierarchy level is only used for "does A outrank B" comparisons (e.g.
reporting). Access decisions use ``BehaviorClass``: lawyers and
psychologists share a level but not a department.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Mapping

from casework.security.errors import InvalidRole

logger = logging.getLogger(__name__)


# ---- Data structures -----------------------------------------------------------------


class Role(str, Enum):
    ADMIN = "admin"
    OFFICE_MANAGER = "office_manager"
    LAWYER = "lawyer"
    PSYCHOLOGIST = "psychologist"
    RECEPTIONIST = "receptionist"
    EVENT_COORDINATOR = "event_coordinator"
    CLIENT = "client"


class BehaviorClass(str, Enum):
    """
    Classification used by every evaluator.

    CLIENT only exists so the role table is total; the enforcement point
    rejects client callers before any evaluator runs.
    """

    FULL_ACCESS = "full_access"
    OFFICE_MANAGER = "office_manager"
    STAFF_LIKE = "staff_like"
    CLIENT = "client"


@dataclass(frozen=True)
class RoleProfile:
    role: Role
    level: int
    behavior: BehaviorClass
    english_name: str
    spanish_name: str
    department: str
    description: str

    @property
    def key(self) -> str:
        return self.role.value

    def to_dict(self) -> dict[str, object]:
        return {
            "key": self.key,
            "level": self.level,
            "behavior": self.behavior.value,
            "english_name": self.english_name,
            "spanish_name": self.spanish_name,
            "department": self.department,
            "description": self.description,
        }


# ---- Role table ----------------------------------------------------------------------


ROLE_TABLE: Mapping[Role, RoleProfile] = {
    Role.ADMIN: RoleProfile(
        role=Role.ADMIN,
        level=1,
        behavior=BehaviorClass.FULL_ACCESS,
        english_name="Administrator",
        spanish_name="Administrador",
        department="Administration",
        description="Full system access and management",
    ),
    Role.OFFICE_MANAGER: RoleProfile(
        role=Role.OFFICE_MANAGER,
        level=2,
        behavior=BehaviorClass.OFFICE_MANAGER,
        english_name="Office Manager",
        spanish_name="Gerente de Oficina",
        department="Management",
        description="Office-level management and oversight",
    ),
    Role.LAWYER: RoleProfile(
        role=Role.LAWYER,
        level=3,
        behavior=BehaviorClass.STAFF_LIKE,
        english_name="Lawyer",
        spanish_name="Abogado/a",
        department="Legal",
        description="Legal case management and documentation",
    ),
    Role.PSYCHOLOGIST: RoleProfile(
        role=Role.PSYCHOLOGIST,
        level=3,
        behavior=BehaviorClass.STAFF_LIKE,
        english_name="Psychologist",
        spanish_name="Psicólogo/a",
        department="Psychology",
        description="Psychological assessment and counseling",
    ),
    Role.RECEPTIONIST: RoleProfile(
        role=Role.RECEPTIONIST,
        level=4,
        behavior=BehaviorClass.STAFF_LIKE,
        english_name="Receptionist",
        spanish_name="Recepcionista",
        department="Administration",
        description="Front desk and appointment management",
    ),
    Role.EVENT_COORDINATOR: RoleProfile(
        role=Role.EVENT_COORDINATOR,
        level=5,
        behavior=BehaviorClass.STAFF_LIKE,
        english_name="Event Coordinator",
        spanish_name="Coordinador/a de Eventos",
        department="Events",
        description="Event planning and coordination",
    ),
    Role.CLIENT: RoleProfile(
        role=Role.CLIENT,
        level=6,
        behavior=BehaviorClass.CLIENT,
        english_name="Client",
        spanish_name="Cliente",
        department="",
        description="Client of the organization (mobile app only)",
    ),
}


def _check_table(table: Mapping[Role, RoleProfile]) -> None:
    missing = [r.value for r in Role if r not in table]
    if missing:
        raise RuntimeError(f"role table is missing profiles for: {missing}")
    for role, profile in table.items():
        if profile.role is not role:
            raise RuntimeError(f"role table entry {role.value!r} holds profile for {profile.role.value!r}")


_check_table(ROLE_TABLE)


# ---- Classifier ----------------------------------------------------------------------


def parse_role(key: str | Role) -> Role:
    """Return the ``Role`` for ``key`` or raise ``InvalidRole``."""

    if isinstance(key, Role):
        return key
    try:
        return Role(str(key).strip())
    except ValueError:
        valid = ", ".join(r.value for r in Role)
        logger.info("Rejected unknown role key=%r", key)
        raise InvalidRole(f"Invalid role '{key}'. Valid roles are: {valid}") from None


def classify(key: str | Role) -> RoleProfile:
    return ROLE_TABLE[parse_role(key)]


def is_full_access(key: str | Role) -> bool:
    return classify(key).behavior is BehaviorClass.FULL_ACCESS


def is_office_manager(key: str | Role) -> bool:
    return classify(key).behavior is BehaviorClass.OFFICE_MANAGER


def is_staff_like(key: str | Role) -> bool:
    return classify(key).behavior is BehaviorClass.STAFF_LIKE


def is_client(key: str | Role) -> bool:
    return classify(key).behavior is BehaviorClass.CLIENT


def hierarchy_level(key: str | Role) -> int:
    return classify(key).level


def has_higher_or_equal_access(role_a: str | Role, role_b: str | Role) -> bool:
    """True if ``role_a`` is at or above ``role_b`` in the hierarchy."""
    return hierarchy_level(role_a) <= hierarchy_level(role_b)


def staff_roles() -> list[RoleProfile]:
    """All non-client profiles, most privileged first."""
    profiles = [p for p in ROLE_TABLE.values() if p.behavior is not BehaviorClass.CLIENT]
    return sorted(profiles, key=lambda p: (p.level, p.key))


def roles_by_department(department: str) -> list[RoleProfile]:
    return [p for p in staff_roles() if p.department == department]
