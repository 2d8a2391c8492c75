from typing import Optional

from pydantic import Field

from schemas.common import CamelModel


class LoginRequest(CamelModel):
    email: str
    password: str


class UserSummary(CamelModel):
    id: int
    username: str
    email: str
    phone_number: Optional[str] = None
    is_admin: bool = False


class LoginResponse(CamelModel):
    token: str
    user: UserSummary


class UserCreate(CamelModel):
    username: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)
    phone_number: Optional[str] = None
    is_admin: bool = False


class UserMessage(CamelModel):
    msg: str
    user: UserSummary


class ProfileUpdate(CamelModel):
    phone_number: Optional[str] = None
    current_password: Optional[str] = None
    new_password: Optional[str] = Field(None, min_length=1)
