"""Project and project membership endpoints"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from teamspace.api.v1.serializers import serialize_project, serialize_project_detail
from teamspace.database import get_db
from teamspace.dependencies import (
    ensure_project_manager,
    ensure_project_member,
    get_broadcaster,
    get_current_user,
    require_admin,
)
from teamspace.models import (
    InvalidTransition,
    NotificationType,
    Project,
    ProjectCategory,
    ProjectStatus,
    User,
)
from teamspace.realtime import Broadcaster
from teamspace.repositories import projects as project_repo
from teamspace.repositories import users as user_repo
from teamspace.schemas import (
    Envelope,
    ListEnvelope,
    MemberAdd,
    ProjectCreate,
    ProjectDetailResponse,
    ProjectResponse,
    ProjectUpdate,
)
from teamspace.services.notifications import notify_safely

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_project_or_404(db: Session, project_id: int) -> Project:
    project = project_repo.get_project(db, project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project


def _with_counts(db: Session, project: Project) -> ProjectResponse:
    counts = project_repo.task_counts(db, [project.id])
    return serialize_project(project, counts.get(project.id, (0, 0)))


@router.get("", response_model=ListEnvelope[ProjectResponse])
async def list_projects(
    status_filter: Optional[ProjectStatus] = Query(None, alias="status"),
    category: Optional[ProjectCategory] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Projects the current user can see, with task and member counts."""
    projects = project_repo.list_projects(db, current_user, status=status_filter, category=category)
    counts = project_repo.task_counts(db, [project.id for project in projects])
    data = [serialize_project(project, counts.get(project.id, (0, 0))) for project in projects]
    return ListEnvelope(count=len(data), data=data)


@router.get("/{project_id}", response_model=Envelope[ProjectDetailResponse])
async def get_project(
    project_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    project = _get_project_or_404(db, project_id)
    ensure_project_member(project, current_user)

    by_status = project_repo.tasks_by_status(db, project.id)
    return Envelope(data=serialize_project_detail(project, by_status))


@router.post("", response_model=Envelope[ProjectResponse], status_code=status.HTTP_201_CREATED)
async def create_project(
    project_in: ProjectCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    project = project_repo.create_project(
        db,
        current_user,
        name=project_in.name,
        description=project_in.description,
        category=project_in.category,
    )
    logger.info("User %s created project %s", current_user.id, project.id)
    return Envelope(data=serialize_project(project), message="Project created successfully")


@router.put("/{project_id}", response_model=Envelope[ProjectResponse])
async def update_project(
    project_id: int,
    project_update: ProjectUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    project = _get_project_or_404(db, project_id)
    ensure_project_manager(project, current_user, "Not authorized to update this project")

    try:
        project = project_repo.update_project(db, project, project_update.model_dump(exclude_unset=True))
    except InvalidTransition as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    return Envelope(data=_with_counts(db, project), message="Project updated successfully")


@router.delete("/{project_id}", response_model=Envelope[None])
async def delete_project(
    project_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Projects are archived by moving them to ``completed``; nothing is removed."""
    project = _get_project_or_404(db, project_id)

    try:
        project_repo.complete_project(db, project)
    except InvalidTransition as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    return Envelope(message="Project archived successfully")


@router.post("/{project_id}/members", response_model=Envelope[ProjectResponse])
async def add_project_member(
    project_id: int,
    member_in: MemberAdd,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    project = _get_project_or_404(db, project_id)
    ensure_project_manager(project, current_user, "Not authorized to add members to this project")

    user = user_repo.get_user(db, member_in.user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if project.is_member(user.id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User is already a member of this project")

    project = project_repo.add_member(db, project, user.id)

    message = f'You\'ve been added to project "{project.name}"'
    notify_safely(
        db,
        user.id,
        NotificationType.PROJECT_MEMBER_ADDED,
        "Added to Project",
        message,
        project_id=project.id,
        triggered_by_id=current_user.id,
    )
    await broadcaster.to_user(
        user.id,
        "notification",
        {"type": NotificationType.PROJECT_MEMBER_ADDED.value, "projectId": project.id, "message": message},
    )

    return Envelope(data=_with_counts(db, project), message="Member added successfully")


@router.delete("/{project_id}/members/{user_id}", response_model=Envelope[ProjectResponse])
async def remove_project_member(
    project_id: int,
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    project = _get_project_or_404(db, project_id)
    ensure_project_manager(project, current_user, "Not authorized to remove members from this project")

    if project.is_owner(user_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot remove project owner")
    if not project.is_member(user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User is not a member of this project")

    project = project_repo.remove_member(db, project, user_id)
    return Envelope(data=_with_counts(db, project), message="Member removed successfully")
