"""
Seed the database with an admin, three team members and a board of sample tasks.
Users are created only if missing; existing tasks are replaced.

Usage:
    python seed_sample_data.py
"""
from datetime import timedelta

from sqlalchemy.orm import Session

from app import task_service, user_service
from app.db import get_db_session, init_db
from app.logger import get_logger, setup_logging
from app.models import Task, User, utcnow

logger = get_logger(__name__)

USERS = [
    # username, email, password, is_admin
    ("admin", "admin@example.com", "admin123", True),
    ("john_doe", "john@example.com", "password123", False),
    ("jane_smith", "jane@example.com", "password123", False),
    ("mike_wilson", "mike@example.com", "password123", False),
]

# title, description, creator, assignee, status, priority, due in days,
# points, ticks as (point index, username)
SAMPLE_TASKS = [
    ("Design new landing page", "Create a modern and responsive landing page for the new product launch",
     "john_doe", "jane_smith", "today", "high", 1,
     ["Create wireframes", "Design mockups", "Get client approval"], []),
    ("Set up CI/CD pipeline", "Configure automated deployment pipeline for the development team",
     "mike_wilson", "john_doe", "this-week", "medium", 7,
     ["Configure GitHub Actions", "Set up deployment scripts"], []),
    ("Implement user authentication", "Build secure authentication system with JWT tokens",
     "jane_smith", "mike_wilson", "this-month", "high", 30,
     ["Create login form", "Implement JWT tokens", "Add password reset", "Test authentication flow"],
     [(0, "mike_wilson"), (1, "mike_wilson")]),
    ("Database schema design", "Design and implement the database schema for the application",
     "john_doe", "jane_smith", "done", "medium", -5,
     ["Design user table", "Design task table"], [(0, "jane_smith"), (1, "jane_smith")]),
    ("API documentation", "Write comprehensive API documentation for developers",
     "mike_wilson", "john_doe", "done", "low", -2,
     ["Write API endpoints", "Add examples"], [(0, "john_doe"), (1, "john_doe")]),
    ("Mobile app development", "Develop mobile application for iOS and Android platforms",
     "john_doe", "jane_smith", "later", "medium", 90,
     ["Design mobile UI", "Implement core features", "Testing and deployment"], []),
    ("Legacy system migration", "Migrate old system to new architecture",
     "jane_smith", "mike_wilson", "canceled", "high", 15,
     ["Analyze legacy system", "Plan migration strategy"], []),
]


def ensure_users(db: Session) -> dict:
    users = {}
    for username, email, password, is_admin in USERS:
        user = db.query(User).filter(User.username == username).first()
        if not user:
            user = user_service.create_user(db, username, email, password, is_admin=is_admin)
            logger.info(f"Created {username}: {email} / {password}")
        users[username] = user
    return users


def seed_tasks(db: Session, users: dict) -> int:
    removed = db.query(Task).delete()
    db.commit()
    logger.info(f"Cleared {removed} existing tasks")

    now = utcnow()
    for title, description, creator, assignee, status, priority, due_days, points, ticks in SAMPLE_TASKS:
        task = Task(
            title=title,
            description=description,
            created_by=users[creator].id,
            assigned_to=users[assignee].id,
            status=status,
            priority=priority,
            due_date=now + timedelta(days=due_days),
            points=task_service.build_points(points),
            files=[],
        )
        task_service.refresh_derived_fields(task)
        db.add(task)
        db.commit()
        for index, username in ticks:
            task_service.tick_point(db, task.id, index, users[username].id)

    return len(SAMPLE_TASKS)


def main() -> None:
    setup_logging("INFO")
    init_db()
    with get_db_session() as db:
        users = ensure_users(db)
        count = seed_tasks(db, users)
    logger.info(f"Seeded {len(users)} users and {count} tasks")


if __name__ == "__main__":
    main()
