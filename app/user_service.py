"""
User management: admin-side CRUD and profile self-service.
"""
from typing import List, Optional

from sqlalchemy.orm import Session

from app.errors import Conflict, InvalidCredentials, NotFound
from app.logger import get_logger, service_operation
from app.models import User
from auth.security import hash_password, verify_password

logger = get_logger(__name__)


def _get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


@service_operation("create_user")
def create_user(
    db: Session,
    username: str,
    email: str,
    password: str,
    phone_number: Optional[str] = None,
    is_admin: bool = False,
) -> User:
    """
    Create a user. Email uniqueness is checked before username uniqueness.

    Raises:
        Conflict: email or username already taken
    """
    if db.query(User).filter(User.email == email).first():
        raise Conflict("User with this email already exists")
    if db.query(User).filter(User.username == username).first():
        raise Conflict("User with this username already exists")

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        phone_number=phone_number,
        is_admin=bool(is_admin),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Created user {user.username} (admin={user.is_admin})")
    return user


def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.id).all()


@service_operation("delete_user")
def delete_user(db: Session, user_id: int) -> None:
    """Hard delete. Tasks that reference the user keep the dangling id."""
    user = _get_user(db, user_id)
    db.delete(user)
    db.commit()
    logger.info(f"Deleted user {user_id}")


def get_profile(db: Session, user_id: int) -> User:
    return _get_user(db, user_id)


@service_operation("update_profile")
def update_profile(
    db: Session,
    user_id: int,
    phone_number: Optional[str] = None,
    current_password: Optional[str] = None,
    new_password: Optional[str] = None,
) -> User:
    """
    Update the caller's own phone number and/or password.

    The phone number is written whenever it is given. A new password is only
    accepted together with a current password that verifies.

    Raises:
        InvalidCredentials: current password missing or wrong
    """
    user = _get_user(db, user_id)

    if new_password is not None:
        if current_password is None or not verify_password(current_password, user.password_hash):
            raise InvalidCredentials("Current password is incorrect")

    if phone_number is not None:
        user.phone_number = phone_number
    if new_password is not None:
        user.password_hash = hash_password(new_password)

    db.commit()
    db.refresh(user)
    return user
