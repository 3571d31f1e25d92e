"""Authentication endpoints"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from teamspace.api.v1.serializers import serialize_user
from teamspace.database import get_db
from teamspace.dependencies import get_current_user
from teamspace.models import User, UserRole
from teamspace.repositories import users as user_repo
from teamspace.schemas import (
    AuthPayload,
    Envelope,
    PasswordChange,
    ProfileUpdate,
    UserLogin,
    UserRegister,
    UserResponse,
)
from teamspace.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter()


def _auth_payload(user: User) -> AuthPayload:
    return AuthPayload(user=serialize_user(user), token=create_access_token(user.id))


@router.post("/register", response_model=Envelope[AuthPayload], status_code=status.HTTP_201_CREATED)
async def register(
    user_in: UserRegister,
    db: Session = Depends(get_db),
):
    """Create an account. The very first account becomes the admin; later
    accounts are editors and only an admin can promote them."""
    if user_repo.get_user_by_email(db, user_in.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User with this email already exists")

    role = UserRole.ADMIN if user_repo.count_users(db) == 0 else UserRole.EDITOR
    password_hash = await run_in_threadpool(hash_password, user_in.password)
    user = user_repo.create_user(db, user_in.email, password_hash, user_in.name, role)
    user = user_repo.record_login(db, user)
    logger.info("Registered user %s with role %s", user.id, user.role.value)

    return Envelope(data=_auth_payload(user))


@router.post("/login", response_model=Envelope[AuthPayload])
async def login(
    credentials: UserLogin,
    db: Session = Depends(get_db),
):
    user = user_repo.get_user_by_email(db, credentials.email)
    if not user or not await run_in_threadpool(verify_password, credentials.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account is deactivated")

    user = user_repo.record_login(db, user)
    return Envelope(data=_auth_payload(user))


@router.get("/me", response_model=Envelope[UserResponse])
async def read_me(current_user: User = Depends(get_current_user)):
    return Envelope(data=serialize_user(current_user))


@router.put("/update-profile", response_model=Envelope[UserResponse])
async def update_profile(
    profile: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    changes = profile.model_dump(exclude_unset=True)
    email = changes.get("email")
    if email and email != current_user.email:
        existing = user_repo.get_user_by_email(db, email)
        if existing and existing.id != current_user.id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already in use")

    user = user_repo.update_user(db, current_user, changes)
    return Envelope(data=serialize_user(user), message="Profile updated successfully")


@router.put("/change-password", response_model=Envelope[None])
async def change_password(
    passwords: PasswordChange,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not await run_in_threadpool(verify_password, passwords.current_password, current_user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Current password is incorrect")

    password_hash = await run_in_threadpool(hash_password, passwords.new_password)
    user_repo.update_user(db, current_user, {"password_hash": password_hash})
    return Envelope(message="Password changed successfully")
