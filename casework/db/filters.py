from __future__ import annotations

from sqlalchemy import event, select
from sqlalchemy.orm import Session, with_loader_criteria


@event.listens_for(Session, "do_orm_execute")
def _apply_access_scope(execute_state) -> None:
    """
    Transparent list scoping.

    Handlers keep writing plain queries:
        db.scalars(select(Case)).all()
    and on list requests get only the rows the caller's scope allows.
    Single-resource requests are left alone: the evaluator has already
    decided on that exact row.
    """

    if not execute_state.is_select:
        return

    # Local import to avoid cycles.
    from casework.models.cases import Appointment, Case, Task  # noqa: WPS433 (local import)
    from casework.models.security import User  # noqa: WPS433 (local import)

    stmt = execute_state.statement

    # Soft-deleted rows never show up, scoped or not.
    stmt = stmt.options(
        with_loader_criteria(Case, lambda cls: cls.deleted_at.is_(None), include_aliases=True),
        with_loader_criteria(Appointment, lambda cls: cls.deleted_at.is_(None), include_aliases=True),
        with_loader_criteria(Task, lambda cls: cls.deleted_at.is_(None), include_aliases=True),
    )

    authz = execute_state.session.info.get("authz")
    if authz is None or not authz.is_list_request:
        execute_state.statement = stmt
        return

    office_id = authz.office_scope
    department = authz.department_scope if authz.filter_by_department else None

    # Criteria also reach subqueries, so only the listed resource is scoped.
    if authz.resource == "case":
        if office_id is not None:
            stmt = stmt.options(
                with_loader_criteria(Case, lambda cls: cls.office_id == office_id, include_aliases=True),
            )
        if department is not None:
            stmt = stmt.options(
                with_loader_criteria(Case, lambda cls: cls.category == department, include_aliases=True),
            )

    elif authz.resource == "appointment":
        if office_id is not None:
            office_cases = select(Case.id).where(Case.office_id == office_id)
            stmt = stmt.options(with_loader_criteria(Appointment, Appointment.case_id.in_(office_cases)))
        if department is not None:
            stmt = stmt.options(
                with_loader_criteria(Appointment, lambda cls: cls.department == department, include_aliases=True),
            )

    elif authz.resource == "task":
        if authz.assigned_to_scope is not None:
            assignee_id = authz.assigned_to_scope
            stmt = stmt.options(
                with_loader_criteria(Task, lambda cls: cls.assigned_to_id == assignee_id, include_aliases=True),
            )

    elif authz.resource == "user":
        if office_id is not None:
            stmt = stmt.options(
                with_loader_criteria(User, lambda cls: cls.office_id == office_id, include_aliases=True),
            )

    execute_state.statement = stmt
