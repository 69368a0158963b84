from __future__ import annotations

import logging

from casework.security.context import Caller
from casework.security.decision import Decision
from casework.security.roles import BehaviorClass
from casework.security.store import AccessStore

logger = logging.getLogger(__name__)


def evaluate_appointment_access(
    caller: Caller,
    behavior: BehaviorClass,
    store: AccessStore,
    target_id: int | None,
) -> Decision:
    """
    Decide access to one appointment or to the appointment list.

    Staff-like single appointment, in order:
    1. caller is the assigned staff member -> allow
    2. parent case office differs from caller office -> deny
    3. caller has a department and it differs from the appointment's -> deny
    4. otherwise allow

    A caller without a department is not department-restricted here.
    """

    if behavior is BehaviorClass.FULL_ACCESS:
        return Decision.allow("full_access")

    if behavior is BehaviorClass.OFFICE_MANAGER:
        if target_id is None:
            return Decision.allow("office_list")
        appointment = store.appointment(target_id)
        if appointment is None:
            return Decision.not_found("Appointment not found")
        if appointment.case_office_id != caller.office_id:
            return Decision.deny("Access denied: Appointment belongs to different office")
        return Decision.allow("same_office")

    if behavior is BehaviorClass.STAFF_LIKE:
        if target_id is None:
            return Decision.allow("department_list", filter_by_department=True)
        appointment = store.appointment(target_id)
        if appointment is None:
            return Decision.not_found("Appointment not found")
        if appointment.staff_id == caller.id:
            return Decision.allow("assigned_staff")
        if appointment.case_office_id != caller.office_id:
            return Decision.deny("Access denied: Appointment belongs to different office")
        if caller.department is not None and caller.department != appointment.department:
            return Decision.deny("Access denied: Appointment department not compatible with user department")
        return Decision.allow("office_and_department")

    logger.warning("Appointment evaluator reached with behavior=%s user_id=%s", behavior.value, caller.id)
    return Decision.deny("Access denied for client role")
