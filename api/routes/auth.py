from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app import auth_service, user_service
from app.db import get_db
from app.models import User
from auth.oauth2 import get_current_user, require_admin
from schemas.auth import (
    LoginRequest,
    LoginResponse,
    ProfileUpdate,
    UserCreate,
    UserMessage,
    UserSummary,
)
from schemas.common import Message

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    token, user = auth_service.login(db, payload.email, payload.password)
    return {"token": token, "user": user.to_dict()}


@router.post("/create-user", response_model=UserMessage)
def create_user(
    payload: UserCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    user = user_service.create_user(
        db,
        username=payload.username,
        email=payload.email,
        password=payload.password,
        phone_number=payload.phone_number,
        is_admin=payload.is_admin,
    )
    return {"msg": "User created successfully", "user": user.to_dict()}


@router.get("/users", response_model=List[UserSummary])
def list_users(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return [u.to_dict() for u in user_service.list_users(db)]


@router.delete("/users/{user_id}", response_model=Message)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    user_service.delete_user(db, user_id)
    return {"msg": "User deleted successfully"}


@router.get("/profile", response_model=UserSummary)
def get_profile(current: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return user_service.get_profile(db, current.id).to_dict()


@router.put("/profile", response_model=UserMessage)
def update_profile(
    payload: ProfileUpdate,
    current: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = user_service.update_profile(
        db,
        current.id,
        phone_number=payload.phone_number,
        current_password=payload.current_password,
        new_password=payload.new_password,
    )
    return {"msg": "Profile updated successfully", "user": user.to_dict()}
