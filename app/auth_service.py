"""
Authentication: credential checks and token issuance/verification.
Stateless; nothing is stored server-side beyond the user records.
"""
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from app.errors import InvalidCredentials, Unauthenticated
from app.logger import get_logger
from app.models import User
from auth.jwt_handler import create_access_token, decode_access_token
from auth.security import verify_password

logger = get_logger(__name__)


def login(db: Session, email: str, password: str) -> Tuple[str, User]:
    """
    Check `email`/`password` and issue a token for the matching user.

    Raises:
        InvalidCredentials: unknown email or wrong password
    """
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(password, user.password_hash):
        logger.info(f"Failed login for {email}")
        raise InvalidCredentials()

    token = create_access_token({"sub": str(user.id)})
    logger.info(f"User {user.username} logged in")
    return token, user


def verify(db: Session, token: Optional[str]) -> User:
    """
    Resolve a bearer token to its user.

    Raises:
        Unauthenticated: missing, malformed, expired or forged token, or a
            token naming a user that no longer exists
    """
    if not token:
        raise Unauthenticated("No token")

    payload = decode_access_token(token)
    if not payload:
        raise Unauthenticated()

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise Unauthenticated()

    user = db.get(User, user_id)
    if not user:
        raise Unauthenticated()
    return user
