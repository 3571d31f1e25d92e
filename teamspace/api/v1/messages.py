"""Project chat endpoints"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from teamspace.api.v1.serializers import serialize_message, to_payload
from teamspace.database import get_db
from teamspace.dependencies import ensure_project_member, get_broadcaster, get_current_user
from teamspace.models import Message, NotificationType, User
from teamspace.realtime import Broadcaster
from teamspace.repositories import messages as message_repo
from teamspace.repositories import page_count
from teamspace.repositories import projects as project_repo
from teamspace.repositories import users as user_repo
from teamspace.schemas import Envelope, MessageCreate, MessageResponse, MessageUpdate, PageEnvelope, Pagination
from teamspace.services.mentions import parse_mentions
from teamspace.services.notifications import notify_safely

router = APIRouter()


def _get_message_or_404(db: Session, message_id: int) -> Message:
    message = message_repo.get_message(db, message_id)
    if not message:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    return message


def _resolve_mentions(db: Session, content: str):
    return parse_mentions(content, user_repo.list_active_users(db))


@router.get("/project/{project_id}", response_model=PageEnvelope[MessageResponse])
async def list_messages(
    project_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """A page of the project's chat, oldest message first."""
    project = project_repo.get_project(db, project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    ensure_project_member(project, current_user, "Not authorized to view messages in this project")

    messages, total = message_repo.list_project_messages(db, project.id, page=page, limit=limit)
    return PageEnvelope(
        data=[serialize_message(message) for message in messages],
        pagination=Pagination(total=total, page=page, pages=page_count(total, limit)),
    )


@router.post("", response_model=Envelope[MessageResponse], status_code=status.HTTP_201_CREATED)
async def send_message(
    message_in: MessageCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    project = project_repo.get_project(db, message_in.project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    ensure_project_member(project, current_user, "Not authorized to post in this project")

    mentions = _resolve_mentions(db, message_in.content)
    message = message_repo.create_message(db, project.id, current_user.id, message_in.content, mentions)
    response = serialize_message(message)
    await broadcaster.to_project(project.id, "new_message", to_payload(response))

    text = f"{current_user.name} mentioned you in {project.name}"
    for user_id in mentions:
        if user_id == current_user.id:
            continue
        notify_safely(
            db,
            user_id,
            NotificationType.MESSAGE_MENTION,
            "You were mentioned",
            text,
            project_id=project.id,
            triggered_by_id=current_user.id,
        )
        await broadcaster.to_user(
            user_id,
            "notification",
            {"type": "mention", "message": text, "projectId": project.id, "messageId": response.id},
        )

    return Envelope(data=response)


@router.put("/{message_id}", response_model=Envelope[MessageResponse])
async def edit_message(
    message_id: int,
    message_update: MessageUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    message = _get_message_or_404(db, message_id)
    if message.sender_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to edit this message")

    mentions = _resolve_mentions(db, message_update.content)
    message = message_repo.edit_message(db, message, message_update.content, mentions)
    response = serialize_message(message)
    await broadcaster.to_project(message.project_id, "message_updated", to_payload(response))

    return Envelope(data=response)


@router.delete("/{message_id}", response_model=Envelope[None])
async def delete_message(
    message_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    """Soft-delete: the row stays, its content is replaced."""
    message = _get_message_or_404(db, message_id)
    if not (message.sender_id == current_user.id or current_user.is_admin):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to delete this message")

    message = message_repo.delete_message(db, message)
    await broadcaster.to_project(message.project_id, "message_deleted", {"id": message.id})

    return Envelope(message="Message deleted successfully")
