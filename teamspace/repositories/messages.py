"""Chat message persistence"""
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, selectinload

from teamspace.models import Message, RecordState


def _message_query(db: Session):
    return db.query(Message).options(selectinload(Message.sender))


def get_message(db: Session, message_id: int) -> Optional[Message]:
    """Return a message that has not been deleted."""
    return (
        _message_query(db)
        .filter(Message.id == message_id, Message.state == RecordState.ACTIVE)
        .first()
    )


def list_project_messages(db: Session, project_id: int, page: int = 1, limit: int = 50) -> Tuple[List[Message], int]:
    """Page through a project's messages newest-first, returning the page oldest-first."""
    query = _message_query(db).filter(
        Message.project_id == project_id,
        Message.state == RecordState.ACTIVE,
    )
    total = query.count()
    newest_first = (
        query.order_by(Message.created_at.desc(), Message.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return list(reversed(newest_first)), total


def create_message(db: Session, project_id: int, sender_id: int, content: str, mentions: List[int]) -> Message:
    message = Message(
        project_id=project_id,
        sender_id=sender_id,
        content=content,
        mentions=list(mentions),
        state=RecordState.ACTIVE,
    )
    db.add(message)
    db.commit()
    return _message_query(db).filter(Message.id == message.id).first()


def edit_message(db: Session, message: Message, content: str, mentions: List[int]) -> Message:
    message.edit(content, mentions)
    db.commit()
    db.refresh(message)
    return message


def delete_message(db: Session, message: Message) -> Message:
    message.soft_delete()
    db.commit()
    db.refresh(message)
    return message
