from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from casework.db.session import get_db
from casework.models.cases import Task
from casework.schemas.cases import TaskOut, TaskUpdate

router = APIRouter(tags=["tasks"])


@router.get("/tasks", response_model=list[TaskOut])
def list_tasks(db: Session = Depends(get_db)) -> list[Task]:
    # Non-admin callers only get their own tasks (assigned-to scope).
    return list(db.scalars(select(Task).order_by(Task.id)).all())


@router.get("/tasks/{id}", response_model=TaskOut)
def get_task(id: int, db: Session = Depends(get_db)) -> Task:
    return _load(db, id)


@router.patch("/tasks/{id}", response_model=TaskOut)
def update_task(id: int, payload: TaskUpdate, db: Session = Depends(get_db)) -> Task:
    task = _load(db, id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(task, field, value)
    db.commit()
    db.refresh(task)
    return task


def _load(db: Session, task_id: int) -> Task:
    task = db.scalars(select(Task).where(Task.id == task_id)).first()
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task
