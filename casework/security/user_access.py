from __future__ import annotations

from casework.security.context import Caller
from casework.security.decision import Decision
from casework.security.roles import BehaviorClass
from casework.security.store import AccessStore


def evaluate_user_access(
    caller: Caller,
    behavior: BehaviorClass,
    store: AccessStore,
    target_id: int | None,
) -> Decision:
    """Staff see users of their own office (and themselves); full access sees everyone."""

    if behavior is BehaviorClass.FULL_ACCESS:
        return Decision.allow("full_access")

    if behavior is BehaviorClass.CLIENT:
        return Decision.deny("Access denied for client role")

    if target_id is None:
        return Decision.allow("office_list")

    user = store.user(target_id)
    if user is None:
        return Decision.not_found("User not found")
    if user.id == caller.id:
        return Decision.allow("self")
    if user.office_id is not None and user.office_id == caller.office_id:
        return Decision.allow("same_office")
    return Decision.deny("Access denied: User belongs to different office")
