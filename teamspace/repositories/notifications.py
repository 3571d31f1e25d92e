"""Notification persistence"""
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, selectinload

from teamspace.models import Notification
from teamspace.utils.time import utc_now


def _notification_query(db: Session):
    return db.query(Notification).options(
        selectinload(Notification.project),
        selectinload(Notification.task),
        selectinload(Notification.triggered_by),
    )


def list_for_user(db: Session, user_id: int, page: int = 1, limit: int = 20) -> Tuple[List[Notification], int]:
    query = _notification_query(db).filter(Notification.user_id == user_id)
    total = query.count()
    notifications = (
        query.order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return notifications, total


def unread_count(db: Session, user_id: int) -> int:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.read.is_(False))
        .count()
    )


def get_for_user(db: Session, notification_id: int, user_id: int) -> Optional[Notification]:
    return (
        _notification_query(db)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
        .first()
    )


def mark_read(db: Session, notification: Notification) -> Notification:
    notification.mark_read()
    db.commit()
    db.refresh(notification)
    return notification


def mark_all_read(db: Session, user_id: int) -> int:
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.read.is_(False))
        .update({Notification.read: True, Notification.read_at: utc_now()}, synchronize_session=False)
    )
    db.commit()
    return updated


def delete_notification(db: Session, notification: Notification) -> None:
    db.delete(notification)
    db.commit()


def delete_all_for_user(db: Session, user_id: int) -> int:
    deleted = (
        db.query(Notification)
        .filter(Notification.user_id == user_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted
