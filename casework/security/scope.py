from __future__ import annotations

from dataclasses import dataclass
import logging

from casework.security.context import Caller
from casework.security.errors import OfficeNotAssigned
from casework.security.roles import BehaviorClass, RoleProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scope:
    """Office and department restrictions for list queries. Empty for full access."""

    office_id: int | None = None
    department: str | None = None

    @property
    def is_unrestricted(self) -> bool:
        return self.office_id is None and self.department is None


def resolve_scope(caller: Caller, profile: RoleProfile) -> Scope:
    """
    Derive the caller's list scope.

    A non-full-access caller without a home office is a configuration error
    and fails with ``OfficeNotAssigned``; it is never treated as "no scope".
    """

    if profile.behavior is BehaviorClass.FULL_ACCESS:
        return Scope()

    # Clients never reach an evaluator; they only get through on routes
    # configured with `deny_clients: false` and carry no staff scope.
    if profile.behavior is BehaviorClass.CLIENT:
        return Scope()

    if caller.office_id is None:
        logger.info("Caller without office rejected user_id=%s role=%s", caller.id, caller.role.value)
        raise OfficeNotAssigned()

    return Scope(office_id=caller.office_id, department=caller.department or None)
