from __future__ import annotations

import logging

from casework.security.context import Caller
from casework.security.decision import Decision
from casework.security.roles import BehaviorClass
from casework.security.store import AccessStore

logger = logging.getLogger(__name__)


def evaluate_task_access(
    caller: Caller,
    behavior: BehaviorClass,
    store: AccessStore,
    target_id: int | None,
) -> Decision:
    """
    Decide access to one task or to the task list.

    Only full access bypasses assignment. Office managers follow the same
    assignment rules as staff: the task list is "my tasks", a single task is
    visible to its assignee or to anyone holding a case assignment on the
    parent case.
    """

    if behavior is BehaviorClass.FULL_ACCESS:
        return Decision.allow("full_access")

    if behavior is BehaviorClass.CLIENT:
        logger.warning("Task evaluator reached with client caller user_id=%s", caller.id)
        return Decision.deny("Access denied for client role")

    if target_id is None:
        return Decision.allow("my_tasks", assigned_to_scope=caller.id)

    task = store.task(target_id)
    if task is None:
        return Decision.not_found("Task not found")
    if task.assigned_to_id is not None and task.assigned_to_id == caller.id:
        return Decision.allow("assignee")
    if store.has_case_assignment(caller.id, task.case_id):
        return Decision.allow("case_assignment")
    return Decision.deny("Access denied: Task belongs to unassigned case")
