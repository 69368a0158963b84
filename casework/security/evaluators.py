from __future__ import annotations

from collections.abc import Callable
from typing import Mapping

from casework.security.appointment_access import evaluate_appointment_access
from casework.security.case_access import evaluate_case_access
from casework.security.context import Caller
from casework.security.decision import Decision
from casework.security.roles import BehaviorClass
from casework.security.store import AccessStore
from casework.security.task_access import evaluate_task_access
from casework.security.user_access import evaluate_user_access

Evaluator = Callable[[Caller, BehaviorClass, AccessStore, int | None], Decision]

# Resource name (as used in security_config.yaml) -> evaluator.
EVALUATORS: Mapping[str, Evaluator] = {
    "case": evaluate_case_access,
    "appointment": evaluate_appointment_access,
    "task": evaluate_task_access,
    "user": evaluate_user_access,
}

RESOURCE_NAMES: frozenset[str] = frozenset(EVALUATORS)


def evaluator_for(resource: str) -> Evaluator:
    try:
        return EVALUATORS[resource]
    except KeyError:
        raise ValueError(f"No access evaluator for resource {resource!r}") from None
