"""
SQLAlchemy models for the taskboard.

Tasks are stored document-style: the checklist points and file records live in
JSON columns on the task row, and user references (creator, assignee, point
completions, uploaders) are plain ids without foreign keys, so deleting a user
leaves dangling references rather than cascading.
"""
import enum
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Index,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskStatus(str, enum.Enum):
    """Kanban columns, in board order."""
    TODAY = "today"
    THIS_WEEK = "this-week"
    THIS_MONTH = "this-month"
    LATER = "later"
    DONE = "done"
    CANCELED = "canceled"


class TaskPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class User(Base):
    """
    Model for team members.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(120), nullable=False, unique=True)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    phone_number = Column(String(40), nullable=True)
    is_admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"

    def to_dict(self) -> dict:
        """Summary view; never includes the password hash."""
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "phone_number": self.phone_number,
            "is_admin": bool(self.is_admin),
        }

    def to_ref(self) -> dict:
        return {"id": self.id, "username": self.username}


class Task(Base):
    """
    Model for tasks on the board.

    `points` holds ``{"text": str, "completed_by": [user_id, ...]}`` entries and
    `files` holds ``{"filename", "original_name", "path", "uploaded_by",
    "uploaded_at"}`` entries. `progress` and `updated_at` are derived and are
    recomputed by the task service before every write.
    """
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(300), nullable=False)
    description = Column(Text, nullable=True)
    created_by = Column(Integer, nullable=False)
    assigned_to = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, default=TaskStatus.TODAY.value)
    priority = Column(String(10), nullable=False, default=TaskPriority.MEDIUM.value)
    due_date = Column(DateTime(timezone=True), nullable=True)
    points = Column(JSON, nullable=False, default=list)
    files = Column(JSON, nullable=False, default=list)
    progress = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_tasks_status", "status"),
        Index("ix_tasks_created_by", "created_by"),
        Index("ix_tasks_assigned_to", "assigned_to"),
    )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, status={self.status}, progress={self.progress})>"

    def to_dict(self, resolve: Callable[[Optional[int]], Optional[Dict]]) -> dict:
        """
        Serialize the task, resolving user ids to ``{id, username}`` through
        `resolve`. Ids of users that no longer exist resolve to None.
        """
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "created_by": resolve(self.created_by),
            "assigned_to": resolve(self.assigned_to),
            "status": self.status,
            "priority": self.priority,
            "due_date": self.due_date,
            "points": [
                {
                    "text": point["text"],
                    "completed_by": [
                        ref for ref in (resolve(uid) for uid in point.get("completed_by", []))
                        if ref is not None
                    ],
                }
                for point in (self.points or [])
            ],
            "files": [
                {
                    "filename": f.get("filename"),
                    "original_name": f.get("original_name"),
                    "path": f.get("path"),
                    "uploaded_by": resolve(f.get("uploaded_by")),
                    "uploaded_at": f.get("uploaded_at"),
                }
                for f in (self.files or [])
            ],
            "progress": self.progress,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
