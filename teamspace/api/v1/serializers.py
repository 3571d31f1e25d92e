"""Build response schemas from ORM rows."""
from typing import Dict, Optional, Tuple

from teamspace.models import Message, Notification, Project, ProjectFile, Task, User
from teamspace.schemas import (
    MessageResponse,
    NotificationProject,
    NotificationResponse,
    NotificationTask,
    ProjectDetailResponse,
    ProjectFileResponse,
    ProjectMemberResponse,
    ProjectResponse,
    ProjectSummary,
    TaskResponse,
    UserResponse,
    UserSummary,
)
from teamspace.services.storage import format_size, type_category


def serialize_user(user: User) -> UserResponse:
    return UserResponse.model_validate(user)


def summarize_user(user: Optional[User]) -> Optional[UserSummary]:
    return UserSummary.model_validate(user) if user is not None else None


def serialize_project(project: Project, counts: Tuple[int, int] = (0, 0)) -> ProjectResponse:
    task_count, completed_count = counts
    return ProjectResponse(
        id=project.id,
        name=project.name,
        description=project.description or "",
        category=project.category,
        status=project.status,
        created_by=summarize_user(project.created_by),
        members=[
            ProjectMemberResponse(user=summarize_user(m.user), role=m.role, added_at=m.added_at)
            for m in project.members
        ],
        member_count=len(project.members),
        task_count=task_count,
        completed_count=completed_count,
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


def serialize_project_detail(project: Project, tasks_by_status: Dict[str, int]) -> ProjectDetailResponse:
    counts = (sum(tasks_by_status.values()), tasks_by_status.get("done", 0))
    base = serialize_project(project, counts)
    return ProjectDetailResponse(**base.model_dump(), tasks_by_status=tasks_by_status)


def serialize_task(task: Task) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        project_id=task.project_id,
        project=ProjectSummary.model_validate(task.project),
        title=task.title,
        description=task.description or "",
        status=task.status,
        priority=task.priority,
        assigned_to=task.assigned_to_id,
        assignee=summarize_user(task.assignee),
        assignee_name=task.assignee.name if task.assignee else None,
        due_date=task.due_date,
        completed_at=task.completed_at,
        is_overdue=task.is_overdue(),
        created_by=summarize_user(task.creator),
        order=task.position,
        tags=list(task.tags or []),
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


def serialize_message(message: Message) -> MessageResponse:
    return MessageResponse(
        id=message.id,
        project_id=message.project_id,
        sender=summarize_user(message.sender),
        user_id=message.sender_id,
        user_name=message.sender.name,
        content=message.content,
        mentions=list(message.mentions or []),
        is_edited=message.is_edited,
        edited_at=message.edited_at,
        is_deleted=message.is_deleted,
        timestamp=message.created_at,
        created_at=message.created_at,
        updated_at=message.updated_at,
    )


def serialize_notification(notification: Notification) -> NotificationResponse:
    return NotificationResponse(
        id=notification.id,
        type=notification.type,
        title=notification.title,
        message=notification.message,
        project_id=notification.project_id,
        task_id=notification.task_id,
        project=NotificationProject.model_validate(notification.project) if notification.project else None,
        task=NotificationTask.model_validate(notification.task) if notification.task else None,
        triggered_by=summarize_user(notification.triggered_by),
        read=notification.read,
        read_at=notification.read_at,
        created_at=notification.created_at,
    )


def serialize_file(project_file: ProjectFile) -> ProjectFileResponse:
    return ProjectFileResponse(
        id=project_file.id,
        project_id=project_file.project_id,
        name=project_file.name,
        original_name=project_file.original_name,
        description=project_file.description or "",
        url=project_file.url,
        storage_path=project_file.storage_path,
        storage_type=project_file.storage_type,
        file_type=project_file.file_type,
        mime_type=project_file.mime_type,
        type_category=type_category(project_file.mime_type),
        size=project_file.size,
        formatted_size=format_size(project_file.size),
        uploaded_by=summarize_user(project_file.uploaded_by),
        created_at=project_file.created_at,
        updated_at=project_file.updated_at,
    )


def to_payload(schema) -> dict:
    """JSON-ready camelCase dict for socket events."""
    return schema.model_dump(mode="json", by_alias=True)
