"""User directory and administration endpoints"""
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from teamspace.api.v1.serializers import serialize_user
from teamspace.database import get_db
from teamspace.dependencies import get_current_user, require_admin
from teamspace.models import User, UserRole
from teamspace.repositories import users as user_repo
from teamspace.schemas import Envelope, ListEnvelope, UserCreate, UserResponse, UserUpdate
from teamspace.security import hash_password

router = APIRouter()


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = user_repo.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("", response_model=ListEnvelope[UserResponse])
async def list_users(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Active users, ordered by name."""
    users = user_repo.list_active_users(db)
    return ListEnvelope(count=len(users), data=[serialize_user(user) for user in users])


@router.get("/{user_id}", response_model=Envelope[UserResponse])
async def get_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return Envelope(data=serialize_user(_get_user_or_404(db, user_id)))


@router.post("", response_model=Envelope[UserResponse], status_code=status.HTTP_201_CREATED)
async def create_user(
    user_in: UserCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if user_repo.get_user_by_email(db, user_in.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User with this email already exists")

    password_hash = await run_in_threadpool(hash_password, user_in.password)
    user = user_repo.create_user(db, user_in.email, password_hash, user_in.name, user_in.role or UserRole.EDITOR)
    return Envelope(data=serialize_user(user), message="User created successfully")


@router.put("/{user_id}", response_model=Envelope[UserResponse])
async def update_user(
    user_id: int,
    user_update: UserUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    user = _get_user_or_404(db, user_id)
    changes = user_update.model_dump(exclude_unset=True)

    if user.id == current_user.id:
        if changes.get("is_active") is False:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot deactivate your own account")
        if changes.get("role") not in (None, current_user.role):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot change your own role")

    email = changes.get("email")
    if email and email != user.email:
        existing = user_repo.get_user_by_email(db, email)
        if existing and existing.id != user.id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already in use")

    user = user_repo.update_user(db, user, changes)
    return Envelope(data=serialize_user(user), message="User updated successfully")


@router.delete("/{user_id}", response_model=Envelope[None])
async def deactivate_user(
    user_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Users are never removed, only deactivated."""
    user = _get_user_or_404(db, user_id)
    if user.id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot deactivate your own account")

    user_repo.update_user(db, user, {"is_active": False})
    return Envelope(message="User deactivated successfully")
