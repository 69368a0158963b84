from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from casework.db.session import get_db
from casework.models.cases import Case
from casework.schemas.cases import CaseOut, CaseUpdate

router = APIRouter(tags=["cases"])


@router.get("/cases", response_model=list[CaseOut])
def list_cases(db: Session = Depends(get_db)) -> list[Case]:
    # Office/department scoping is applied transparently (casework/db/filters.py).
    return list(db.scalars(select(Case).order_by(Case.id)).all())


@router.get("/cases/{id}", response_model=CaseOut)
def get_case(id: int, db: Session = Depends(get_db)) -> Case:
    return _load(db, id)


@router.patch("/cases/{id}", response_model=CaseOut)
def update_case(id: int, payload: CaseUpdate, db: Session = Depends(get_db)) -> Case:
    case = _load(db, id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(case, field, value)
    db.commit()
    db.refresh(case)
    return case


def _load(db: Session, case_id: int) -> Case:
    case = db.scalars(select(Case).where(Case.id == case_id)).first()
    if case is None:
        # Only reachable if the row vanished after the access check.
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Case not found")
    return case
