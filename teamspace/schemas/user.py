"""Schemas for users and authentication"""
from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, StringConstraints, field_validator
from typing_extensions import Annotated

from teamspace.models import UserRole
from teamspace.schemas.base import APIModel

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]


class _EmailNormalized(APIModel):
    @field_validator("email", check_fields=False)
    @classmethod
    def _lower_email(cls, value):
        return value.lower() if value else value


class UserSummary(APIModel):
    id: int
    name: str
    email: str
    avatar: Optional[str] = None


class UserResponse(APIModel):
    id: int
    email: str
    name: str
    role: UserRole
    avatar: Optional[str] = None
    login_streak: int
    last_login: Optional[datetime] = None
    is_active: bool
    created_at: datetime


class UserRegister(_EmailNormalized):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: Name


class UserCreate(UserRegister):
    role: Optional[UserRole] = None


class UserLogin(_EmailNormalized):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserUpdate(_EmailNormalized):
    name: Optional[Name] = None
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class ProfileUpdate(_EmailNormalized):
    name: Optional[Name] = None
    email: Optional[EmailStr] = None


class PasswordChange(APIModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


class AuthPayload(APIModel):
    user: UserResponse
    token: str
