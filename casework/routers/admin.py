from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from casework.db.session import get_db
from casework.models.security import Office
from casework.schemas.security import OfficeOut, RoleOut
from casework.security.decorators import require_roles
from casework.security.roles import staff_roles

router = APIRouter(tags=["admin"])


@router.get("/offices", response_model=list[OfficeOut])
@require_roles(["admin"])
def list_offices(db: Session = Depends(get_db)) -> list[Office]:
    # No config entry required: the decorator metadata is enforced globally.
    return list(db.scalars(select(Office).order_by(Office.id)).all())


@router.get("/roles", response_model=list[RoleOut])
def list_roles() -> list[dict[str, object]]:
    return [profile.to_dict() for profile in staff_roles()]
