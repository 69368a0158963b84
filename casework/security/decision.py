from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Outcome(str, Enum):
    ALLOW = "allow"
    DENY = "deny"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Decision:
    """
    Result of one resource evaluation.

    ``matched`` names the rule that granted access (for logs and tests).
    The filter fields are hints for list requests, consumed by the query layer.
    """

    outcome: Outcome
    reason: str | None = None
    matched: str | None = None
    filter_by_department: bool = False
    assigned_to_scope: int | None = None

    @property
    def allowed(self) -> bool:
        return self.outcome is Outcome.ALLOW

    @classmethod
    def allow(
        cls,
        matched: str,
        *,
        filter_by_department: bool = False,
        assigned_to_scope: int | None = None,
    ) -> Decision:
        return cls(
            Outcome.ALLOW,
            matched=matched,
            filter_by_department=filter_by_department,
            assigned_to_scope=assigned_to_scope,
        )

    @classmethod
    def deny(cls, reason: str) -> Decision:
        return cls(Outcome.DENY, reason=reason)

    @classmethod
    def not_found(cls, reason: str) -> Decision:
        return cls(Outcome.NOT_FOUND, reason=reason)
