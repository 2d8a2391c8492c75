"""
Task routes. Static paths are registered before the `/{task_id}` ones.
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app import task_service
from app.db import get_db
from app.models import TaskStatus, User
from auth.oauth2 import get_current_user
from schemas.common import Message
from schemas.task import (
    AssignRequest,
    Dashboard,
    FileAttach,
    StatusUpdate,
    TaskCreate,
    TaskOut,
    TaskUpdate,
)

router = APIRouter(prefix="/tasks", tags=["Tasks"])


@router.post("", response_model=TaskOut)
def create_task(
    payload: TaskCreate,
    current: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return task_service.create_task(
        db,
        current,
        title=payload.title,
        description=payload.description,
        assigned_to=payload.assigned_to,
        status=payload.status,
        priority=payload.priority,
        due_date=payload.due_date,
        points=payload.points,
    )


@router.get("", response_model=List[TaskOut])
def list_tasks(current: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return task_service.list_tasks(db, current)


@router.get("/status/{status}", response_model=List[TaskOut])
def list_tasks_by_status(
    status: TaskStatus,
    current: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return task_service.list_tasks_by_status(db, current, status)


@router.get("/admin/dashboard", response_model=Dashboard)
def admin_dashboard(current: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return task_service.get_admin_dashboard(db, current)


@router.get("/{task_id}", response_model=TaskOut)
def get_task(task_id: int, current: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return task_service.get_task(db, current, task_id)


@router.put("/{task_id}/status", response_model=TaskOut)
def update_task_status(
    task_id: int,
    payload: StatusUpdate,
    current: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return task_service.update_task_status(
        db, current, task_id, payload.status, assigned_to=payload.assigned_to
    )


@router.put("/{task_id}/assign", response_model=TaskOut)
def assign_task(
    task_id: int,
    payload: AssignRequest,
    current: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return task_service.assign_task(db, current, task_id, payload.assigned_to)


@router.put("/{task_id}/points/{point_idx}/tick", response_model=TaskOut)
def tick_point(
    task_id: int,
    point_idx: int,
    current: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return task_service.tick_point(db, task_id, point_idx, current.id)


@router.put("/{task_id}/points/{point_idx}/untick", response_model=TaskOut)
def untick_point(
    task_id: int,
    point_idx: int,
    current: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return task_service.untick_point(db, task_id, point_idx, current.id)


@router.put("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: int,
    payload: TaskUpdate,
    current: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return task_service.update_task(db, current, task_id, payload.model_dump(exclude_unset=True))


@router.post("/{task_id}/files", response_model=TaskOut)
def add_file(
    task_id: int,
    payload: FileAttach,
    current: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return task_service.add_file_to_task(
        db,
        current,
        task_id,
        filename=payload.filename,
        original_name=payload.original_name,
        path=payload.path,
    )


@router.delete("/{task_id}", response_model=Message)
def delete_task(task_id: int, current: User = Depends(get_current_user), db: Session = Depends(get_db)):
    task_service.delete_task(db, current, task_id)
    return {"msg": "Task deleted successfully"}
