from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.models import TaskPriority, TaskStatus
from schemas.auth import UserSummary
from schemas.common import CamelModel


class UserRef(CamelModel):
    id: int
    username: str


class PointOut(CamelModel):
    text: str
    completed_by: List[UserRef] = []


class FileOut(CamelModel):
    filename: str
    original_name: Optional[str] = None
    path: str
    uploaded_by: Optional[UserRef] = None
    uploaded_at: Optional[datetime] = None


class TaskOut(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    created_by: Optional[UserRef] = None
    assigned_to: Optional[UserRef] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime] = None
    points: List[PointOut] = []
    files: List[FileOut] = []
    progress: int
    created_at: datetime
    updated_at: datetime


class TaskCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=300)
    description: Optional[str] = None
    assigned_to: Optional[int] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    points: List[str] = []


class TaskUpdate(CamelModel):
    title: Optional[str] = Field(None, max_length=300)
    description: Optional[str] = None
    assigned_to: Optional[int] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    points: Optional[List[str]] = None


class StatusUpdate(CamelModel):
    status: TaskStatus
    assigned_to: Optional[int] = None


class AssignRequest(CamelModel):
    assigned_to: int


class FileAttach(CamelModel):
    filename: str = Field(..., min_length=1)
    original_name: Optional[str] = None
    path: str = Field(..., min_length=1)


class DashboardStats(CamelModel):
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    todo_tasks: int
    done_tasks: int
    canceled_tasks: int
    total_users: int


class Dashboard(CamelModel):
    tasks: List[TaskOut]
    users: List[UserSummary]
    stats: DashboardStats
