"""
Authorization rules for users and tasks.

Pure predicates over a caller and a task; the services call them and raise
`Forbidden` when they say no. Point tick/untick has no rule here: any
authenticated user may mark their own completion on any task.
"""
from typing import Optional

from app.models import Task, User


def is_admin(user: User) -> bool:
    return bool(user.is_admin)


def is_owner(user: User, task: Task) -> bool:
    return task.created_by == user.id


def is_assignee(user: User, task: Task) -> bool:
    return task.assigned_to == user.id


def can_view_task(user: User, task: Task) -> bool:
    return is_admin(user) or is_owner(user, task) or is_assignee(user, task)


def can_edit_task(user: User, task: Task) -> bool:
    """Title, description, priority, due date and points."""
    return is_admin(user) or is_owner(user, task)


def can_move_task(user: User, task: Task) -> bool:
    """Kanban column changes."""
    return can_view_task(user, task)


def can_attach_file(user: User, task: Task) -> bool:
    return can_view_task(user, task)


def can_assign_task(user: User) -> bool:
    return is_admin(user)


def can_delete_task(user: User) -> bool:
    return is_admin(user)


def can_manage_users(user: User) -> bool:
    """Create, list and delete users; read the admin dashboard."""
    return is_admin(user)


def effective_assignee(user: User, requested: Optional[int]) -> int:
    """
    Assignee for a task `user` is creating. Only admins may hand a new task to
    someone else; anyone else's request is dropped in favour of themselves.
    """
    if requested is not None and is_admin(user):
        return requested
    return user.id
