from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app import auth_service
from app.db import get_db
from app.errors import Forbidden
from app.models import User
from app.policy import can_manage_users

# auto_error is off so a missing header surfaces as our own 401 body
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    token = credentials.credentials if credentials else None
    return auth_service.verify(db, token)


def require_admin(current: User = Depends(get_current_user)) -> User:
    if not can_manage_users(current):
        raise Forbidden("Admin only")
    return current
