"""Notification endpoints"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from teamspace.api.v1.serializers import serialize_notification
from teamspace.database import get_db
from teamspace.dependencies import get_current_user
from teamspace.models import Notification, User
from teamspace.repositories import notifications as notification_repo
from teamspace.repositories import page_count
from teamspace.schemas import Envelope, NotificationPage, NotificationResponse, Pagination, UnreadCount

router = APIRouter()


def _get_notification_or_404(db: Session, notification_id: int, user: User) -> Notification:
    notification = notification_repo.get_for_user(db, notification_id, user.id)
    if not notification:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return notification


@router.get("", response_model=NotificationPage)
async def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List notifications for the current user, newest first."""
    notifications, total = notification_repo.list_for_user(db, current_user.id, page=page, limit=limit)
    return NotificationPage(
        data=[serialize_notification(notification) for notification in notifications],
        unread_count=notification_repo.unread_count(db, current_user.id),
        pagination=Pagination(total=total, page=page, pages=page_count(total, limit)),
    )


@router.get("/unread-count", response_model=Envelope[UnreadCount])
async def get_unread_count(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return Envelope(data=UnreadCount(count=notification_repo.unread_count(db, current_user.id)))


@router.put("/mark-all-read", response_model=Envelope[None])
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    notification_repo.mark_all_read(db, current_user.id)
    return Envelope(message="All notifications marked as read")


@router.put("/{notification_id}/read", response_model=Envelope[NotificationResponse])
async def mark_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    notification = _get_notification_or_404(db, notification_id, current_user)
    notification = notification_repo.mark_read(db, notification)
    return Envelope(data=serialize_notification(notification))


@router.delete("/{notification_id}", response_model=Envelope[None])
async def delete_notification(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    notification = _get_notification_or_404(db, notification_id, current_user)
    notification_repo.delete_notification(db, notification)
    return Envelope(message="Notification deleted")


@router.delete("", response_model=Envelope[None])
async def clear_notifications(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    notification_repo.delete_all_for_user(db, current_user.id)
    return Envelope(message="All notifications cleared")
