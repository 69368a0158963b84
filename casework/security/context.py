from __future__ import annotations

from dataclasses import dataclass

from casework.security.roles import BehaviorClass, Role


@dataclass(frozen=True)
class Caller:
    """
    The authenticated staff member behind the current request.

    Built once by ``casework.security.auth.load_caller`` and never mutated.
    """

    id: int
    role: Role
    office_id: int | None
    department: str | None


@dataclass(frozen=True)
class AuthzContext:
    """
    Per-request authorization context.

    Attached to:
    - request.state.authz (FastAPI request lifetime)
    - Session.info["authz"] (read by the list-query filters in casework.db.filters)
    """

    caller: Caller
    behavior: BehaviorClass

    # Published by the scope setter
    office_scope: int | None
    department_scope: str | None

    # Published by the resource evaluator (list requests only)
    filter_by_department: bool = False
    assigned_to_scope: int | None = None

    resource: str | None = None
    target_id: int | None = None

    @property
    def caller_role(self) -> str:
        return self.caller.role.value

    @property
    def is_list_request(self) -> bool:
        return self.resource is not None and self.target_id is None

    def as_dict(self) -> dict[str, object]:
        """Published values under the names clients already depend on."""
        return {
            "callerRole": self.caller_role,
            "officeScope": self.office_scope,
            "departmentScope": self.department_scope,
            "assignedToScope": self.assigned_to_scope,
        }
