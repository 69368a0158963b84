"""
Case access evaluator.

Staff-like callers are checked against an ordered tuple of named predicates,
first match wins:

    primary_staff          caller owns the case
    office_and_department  caller has both, both match the case
    office_only            caller has an office but no department, office matches
    department_only        caller has a department but no office, department matches
    assigned_task          caller has a live task on the case
    case_assignment        legacy explicit grant

The three office/department predicates are mutually exclusive: each one
requires a different combination of caller fields to be present.
"""

from __future__ import annotations

from collections.abc import Callable
import logging

from casework.security.context import Caller
from casework.security.decision import Decision
from casework.security.roles import BehaviorClass
from casework.security.store import AccessStore, CaseRef

logger = logging.getLogger(__name__)

CasePredicate = Callable[[Caller, CaseRef, AccessStore], bool]


# ---- Predicates ----------------------------------------------------------------------


def primary_staff(caller: Caller, case: CaseRef, store: AccessStore) -> bool:
    return case.primary_staff_id is not None and case.primary_staff_id == caller.id


def office_and_department(caller: Caller, case: CaseRef, store: AccessStore) -> bool:
    if caller.office_id is None or caller.department is None:
        return False
    return caller.office_id == case.office_id and caller.department == case.department


def office_only(caller: Caller, case: CaseRef, store: AccessStore) -> bool:
    if caller.office_id is None or caller.department is not None:
        return False
    return caller.office_id == case.office_id


def department_only(caller: Caller, case: CaseRef, store: AccessStore) -> bool:
    if caller.department is None or caller.office_id is not None:
        return False
    return caller.department == case.department


def assigned_task(caller: Caller, case: CaseRef, store: AccessStore) -> bool:
    return store.has_assigned_task(caller.id, case.id)


def case_assignment(caller: Caller, case: CaseRef, store: AccessStore) -> bool:
    return store.has_case_assignment(caller.id, case.id)


STAFF_CASE_RULES: tuple[tuple[str, CasePredicate], ...] = (
    ("primary_staff", primary_staff),
    ("office_and_department", office_and_department),
    ("office_only", office_only),
    ("department_only", department_only),
    ("assigned_task", assigned_task),
    ("case_assignment", case_assignment),
)


# ---- Evaluator -----------------------------------------------------------------------


def first_matching_rule(caller: Caller, case: CaseRef, store: AccessStore) -> str | None:
    """Name of the first staff rule granting access, or None."""
    for name, predicate in STAFF_CASE_RULES:
        if predicate(caller, case, store):
            return name
    return None


def evaluate_case_access(
    caller: Caller,
    behavior: BehaviorClass,
    store: AccessStore,
    target_id: int | None,
) -> Decision:
    """
    Decide access to one case (``target_id``) or to the case list (``None``).

    List requests are never enumerated here; the query layer applies the
    office scope (and the department scope when this returns
    ``filter_by_department=True``).
    """

    if behavior is BehaviorClass.FULL_ACCESS:
        return Decision.allow("full_access")

    if behavior is BehaviorClass.OFFICE_MANAGER:
        if target_id is None:
            return Decision.allow("office_list")
        case = store.case(target_id)
        if case is None:
            return Decision.not_found("Case not found")
        if case.office_id != caller.office_id:
            return Decision.deny("Access denied: Case belongs to different office")
        return Decision.allow("same_office")

    if behavior is BehaviorClass.STAFF_LIKE:
        if target_id is None:
            return Decision.allow("department_list", filter_by_department=True)
        case = store.case(target_id)
        if case is None:
            return Decision.not_found("Case not found")
        matched = first_matching_rule(caller, case, store)
        if matched is None:
            return Decision.deny("Access denied: You don't have permission to access this case")
        return Decision.allow(matched)

    logger.warning("Case evaluator reached with behavior=%s user_id=%s", behavior.value, caller.id)
    return Decision.deny("Access denied for client role")
