from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from casework.db.session import get_db
from casework.models.security import User
from casework.schemas.security import AccessOut, UserOut
from casework.security.context import AuthzContext, Caller
from casework.security.dependencies import get_authz, get_current_caller

router = APIRouter(tags=["users"])


@router.get("/me", response_model=UserOut)
def me(caller: Caller = Depends(get_current_caller), db: Session = Depends(get_db)) -> User:
    user = db.get(User, caller.id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/me/access", response_model=AccessOut)
def my_access(authz: AuthzContext = Depends(get_authz)) -> dict[str, object]:
    return authz.as_dict()


@router.get("/users", response_model=list[UserOut])
def list_users(db: Session = Depends(get_db)) -> list[User]:
    return list(db.scalars(select(User).order_by(User.id)).all())


@router.get("/users/{id}", response_model=UserOut)
def get_user(id: int, db: Session = Depends(get_db)) -> User:
    user = db.scalars(select(User).where(User.id == id)).first()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
