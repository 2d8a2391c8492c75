"""
Task operations: CRUD, kanban moves, checklist ticks, file records and the
admin dashboard.

Every write goes through `_save`, which recomputes the derived fields
(`progress`, `updated_at`) before committing, then the task is re-read and
returned serialized with user references resolved to ``{id, username}``.
"""
import copy
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app import policy
from app.errors import Forbidden, NotFound, ValidationFailed
from app.logger import get_logger, service_operation
from app.models import Task, TaskPriority, TaskStatus, User, utcnow

logger = get_logger(__name__)

# Fields a partial update may touch, in the order they are applied
EDITABLE_FIELDS = ("title", "description", "assigned_to", "priority", "due_date", "points")


# ============================================================================
# Derived fields
# ============================================================================

def compute_progress(points: Iterable[dict]) -> int:
    """
    Percentage of points ticked by at least one user, rounded half up.
    A task without points is at 0.
    """
    points = list(points)
    total = len(points)
    if total == 0:
        return 0
    completed = sum(1 for point in points if point.get("completed_by"))
    # floor(100 * completed / total + 0.5) in integer arithmetic
    return (200 * completed + total) // (2 * total)


def refresh_derived_fields(task: Task) -> None:
    task.progress = compute_progress(task.points or [])
    task.updated_at = utcnow()


def _save(db: Session, task: Task) -> Task:
    refresh_derived_fields(task)
    db.commit()
    db.refresh(task)
    return task


# ============================================================================
# Serialization
# ============================================================================

def _referenced_user_ids(tasks: Iterable[Task]) -> set:
    ids = set()
    for task in tasks:
        ids.update((task.created_by, task.assigned_to))
        for point in task.points or []:
            ids.update(point.get("completed_by", []))
        for record in task.files or []:
            ids.add(record.get("uploaded_by"))
    ids.discard(None)
    return ids


def _resolver(db: Session, tasks: List[Task]) -> Callable[[Optional[int]], Optional[Dict]]:
    ids = _referenced_user_ids(tasks)
    refs = {}
    if ids:
        refs = {u.id: u.to_ref() for u in db.query(User).filter(User.id.in_(list(ids)))}
    return lambda user_id: refs.get(user_id)


def serialize_tasks(db: Session, tasks: List[Task]) -> List[dict]:
    resolve = _resolver(db, tasks)
    return [task.to_dict(resolve) for task in tasks]


def serialize_task(db: Session, task: Task) -> dict:
    return serialize_tasks(db, [task])[0]


# ============================================================================
# Helpers
# ============================================================================

def _get_task(db: Session, task_id: int) -> Task:
    task = db.get(Task, task_id)
    if not task:
        raise NotFound("Task not found")
    return task


def _require_user(db: Session, user_id: int) -> int:
    if not db.get(User, user_id):
        raise NotFound("User not found")
    return user_id


def _coerce_status(value) -> str:
    try:
        return TaskStatus(value).value
    except ValueError:
        raise ValidationFailed(f"Invalid status: {value}")


def _coerce_priority(value) -> str:
    try:
        return TaskPriority(value).value
    except ValueError:
        raise ValidationFailed(f"Invalid priority: {value}")


def build_points(texts: Optional[Iterable[str]]) -> List[dict]:
    """Fresh checklist from point texts; blank entries are dropped."""
    return [
        {"text": text, "completed_by": []}
        for text in (texts or [])
        if text and text.strip()
    ]


def _check_reassignment(db: Session, caller: User, task: Task, assigned_to: Optional[int]) -> None:
    if assigned_to is None or assigned_to == task.assigned_to:
        return
    if not policy.can_assign_task(caller):
        raise Forbidden("Only admins can assign tasks to other users")
    _require_user(db, assigned_to)


def _visible_tasks(db: Session, caller: User):
    query = db.query(Task)
    if not policy.is_admin(caller):
        query = query.filter(or_(Task.created_by == caller.id, Task.assigned_to == caller.id))
    return query.order_by(Task.created_at.desc(), Task.id.desc())


# ============================================================================
# Operations
# ============================================================================

@service_operation("create_task")
def create_task(
    db: Session,
    caller: User,
    title: str,
    description: Optional[str] = None,
    assigned_to: Optional[int] = None,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    due_date: Optional[datetime] = None,
    points: Optional[List[str]] = None,
) -> dict:
    if not title or not title.strip():
        raise ValidationFailed("Title is required")

    assignee = policy.effective_assignee(caller, assigned_to)
    if assignee != caller.id:
        _require_user(db, assignee)

    task = Task(
        title=title,
        description=description,
        created_by=caller.id,
        assigned_to=assignee,
        status=_coerce_status(status or TaskStatus.TODAY),
        priority=_coerce_priority(priority or TaskPriority.MEDIUM),
        due_date=due_date,
        points=build_points(points),
        files=[],
        created_at=utcnow(),
    )
    db.add(task)
    _save(db, task)
    logger.info(f"User {caller.id} created task {task.id} for user {assignee}")
    return serialize_task(db, task)


def list_tasks(db: Session, caller: User) -> List[dict]:
    """All tasks for admins; tasks created by or assigned to the caller otherwise."""
    return serialize_tasks(db, _visible_tasks(db, caller).all())


def list_tasks_by_status(db: Session, caller: User, status: str) -> List[dict]:
    status = _coerce_status(status)
    return serialize_tasks(db, _visible_tasks(db, caller).filter(Task.status == status).all())


def get_task(db: Session, caller: User, task_id: int) -> dict:
    task = _get_task(db, task_id)
    if not policy.can_view_task(caller, task):
        raise Forbidden("You cannot view this task")
    return serialize_task(db, task)


@service_operation("update_task_status")
def update_task_status(
    db: Session,
    caller: User,
    task_id: int,
    status: str,
    assigned_to: Optional[int] = None,
) -> dict:
    task = _get_task(db, task_id)
    if not policy.can_move_task(caller, task):
        raise Forbidden("You cannot move this task")
    _check_reassignment(db, caller, task, assigned_to)

    task.status = _coerce_status(status)
    if assigned_to is not None:
        task.assigned_to = assigned_to
    _save(db, task)
    return serialize_task(db, task)


@service_operation("update_task")
def update_task(db: Session, caller: User, task_id: int, fields: dict) -> dict:
    """
    Overwrite the provided fields; omitted fields keep their value.

    Supplying `points` replaces the whole checklist and discards every
    completion mark. `description` and `due_date` may be cleared with None;
    None for the other fields counts as omitted.
    """
    task = _get_task(db, task_id)
    if not policy.can_edit_task(caller, task):
        raise Forbidden("Only the task creator or an admin can edit this task")

    fields = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS}
    _check_reassignment(db, caller, task, fields.get("assigned_to"))

    for name in EDITABLE_FIELDS:
        if name not in fields:
            continue
        value = fields[name]
        if value is None and name not in ("description", "due_date"):
            continue
        if name == "title" and not value.strip():
            raise ValidationFailed("Title is required")
        if name == "priority":
            value = _coerce_priority(value)
        elif name == "points":
            value = build_points(value)
        setattr(task, name, value)

    _save(db, task)
    return serialize_task(db, task)


@service_operation("assign_task")
def assign_task(db: Session, caller: User, task_id: int, assigned_to: int) -> dict:
    if not policy.can_assign_task(caller):
        raise Forbidden("Admin only")
    task = _get_task(db, task_id)
    task.assigned_to = _require_user(db, assigned_to)
    _save(db, task)
    logger.info(f"Task {task_id} assigned to user {assigned_to}")
    return serialize_task(db, task)


def _edit_point(db: Session, task_id: int, index: int, edit: Callable[[List[int]], List[int]]) -> dict:
    task = _get_task(db, task_id)
    points = copy.deepcopy(task.points or [])
    if index < 0 or index >= len(points):
        raise NotFound("Point not found")
    points[index]["completed_by"] = edit(list(points[index].get("completed_by", [])))
    task.points = points
    _save(db, task)
    return serialize_task(db, task)


@service_operation("tick_point")
def tick_point(db: Session, task_id: int, index: int, user_id: int) -> dict:
    """Mark point `index` complete for `user_id`; ticking twice changes nothing."""
    def add(completed_by: List[int]) -> List[int]:
        if user_id not in completed_by:
            completed_by.append(user_id)
        return completed_by

    return _edit_point(db, task_id, index, add)


@service_operation("untick_point")
def untick_point(db: Session, task_id: int, index: int, user_id: int) -> dict:
    """Remove `user_id`'s mark from point `index`; absent marks are ignored."""
    return _edit_point(db, task_id, index, lambda ids: [uid for uid in ids if uid != user_id])


@service_operation("add_file")
def add_file_to_task(
    db: Session,
    caller: User,
    task_id: int,
    filename: str,
    original_name: Optional[str],
    path: str,
) -> dict:
    """Record file metadata on the task. Storing the file itself happens elsewhere."""
    task = _get_task(db, task_id)
    if not policy.can_attach_file(caller, task):
        raise Forbidden("You cannot attach files to this task")

    task.files = list(task.files or []) + [{
        "filename": filename,
        "original_name": original_name,
        "path": path,
        "uploaded_by": caller.id,
        "uploaded_at": utcnow().isoformat(),
    }]
    _save(db, task)
    return serialize_task(db, task)


@service_operation("delete_task")
def delete_task(db: Session, caller: User, task_id: int) -> None:
    if not policy.can_delete_task(caller):
        raise Forbidden("Only admins can delete tasks")
    task = _get_task(db, task_id)
    db.delete(task)
    db.commit()
    logger.info(f"Task {task_id} deleted by user {caller.id}")


def get_admin_dashboard(db: Session, caller: User) -> dict:
    if not policy.can_manage_users(caller):
        raise Forbidden("Admin only")

    tasks = _visible_tasks(db, caller).all()
    users = db.query(User).order_by(User.id).all()

    stats = {
        "total_tasks": len(tasks),
        # Progress-based counts
        "completed_tasks": sum(1 for t in tasks if t.progress >= 100),
        "in_progress_tasks": sum(1 for t in tasks if 0 < t.progress < 100),
        "todo_tasks": sum(1 for t in tasks if t.progress == 0),
        # Status-based counts
        "done_tasks": sum(1 for t in tasks if t.status == TaskStatus.DONE.value),
        "canceled_tasks": sum(1 for t in tasks if t.status == TaskStatus.CANCELED.value),
        "total_users": len(users),
    }
    return {
        "tasks": serialize_tasks(db, tasks),
        "users": [u.to_dict() for u in users],
        "stats": stats,
    }
