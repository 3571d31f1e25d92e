"""Create notifications as a side effect of other mutations."""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from teamspace.models import Notification, NotificationType

logger = logging.getLogger(__name__)


def create_notification(
    db: Session,
    user_id: int,
    type: NotificationType,
    title: str,
    message: str,
    project_id: Optional[int] = None,
    task_id: Optional[int] = None,
    triggered_by_id: Optional[int] = None,
) -> Notification:
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        project_id=project_id,
        task_id=task_id,
        triggered_by_id=triggered_by_id,
        read=False,
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification


def notify_safely(db: Session, user_id: int, type: NotificationType, title: str, message: str, **refs) -> Optional[Notification]:
    """Create a notification without ever failing the caller.

    Call this only after the primary mutation has been committed: a failure
    here rolls back the notification alone.
    """
    try:
        return create_notification(db, user_id, type, title, message, **refs)
    except Exception:
        db.rollback()
        logger.exception("Failed to create %s notification for user %s", type.value, user_id)
        return None
