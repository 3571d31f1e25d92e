"""User persistence"""
from typing import List, Optional

from sqlalchemy.orm import Session

from teamspace.models import User, UserRole


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.lower()).first()


def list_active_users(db: Session) -> List[User]:
    return db.query(User).filter(User.is_active.is_(True)).order_by(User.name.asc(), User.id.asc()).all()


def count_users(db: Session) -> int:
    return db.query(User).count()


def create_user(db: Session, email: str, password_hash: str, name: str, role: UserRole = UserRole.EDITOR) -> User:
    user = User(
        email=email.lower(),
        password_hash=password_hash,
        name=name,
        role=role,
        login_streak=0,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def update_user(db: Session, user: User, changes: dict) -> User:
    if "email" in changes and changes["email"] is not None:
        changes["email"] = changes["email"].lower()
    for field, value in changes.items():
        if value is not None:
            setattr(user, field, value)
    db.commit()
    db.refresh(user)
    return user


def record_login(db: Session, user: User) -> User:
    user.update_login_streak()
    db.commit()
    db.refresh(user)
    return user
