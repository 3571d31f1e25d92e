"""Task endpoints"""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from teamspace.api.v1.serializers import serialize_task, summarize_user, to_payload
from teamspace.database import get_db
from teamspace.dependencies import ensure_project_member, get_broadcaster, get_current_user
from teamspace.models import NotificationType, Task, TaskStatus, User
from teamspace.realtime import Broadcaster
from teamspace.repositories import projects as project_repo
from teamspace.repositories import tasks as task_repo
from teamspace.repositories import users as user_repo
from teamspace.schemas import Envelope, ListEnvelope, ProjectTasks, TaskCreate, TaskResponse, TaskUpdate
from teamspace.services.notifications import notify_safely

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_task_or_404(db: Session, task_id: int) -> Task:
    task = task_repo.get_task(db, task_id)
    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task


def _ensure_assignable(db: Session, user_id: Optional[int]) -> None:
    if user_id is None:
        return
    user = user_repo.get_user(db, user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Assigned user not found")


async def _announce_task(
    db: Session,
    broadcaster: Broadcaster,
    task: Task,
    actor: User,
    previous_assignee: Optional[int],
    previous_status: Optional[TaskStatus],
    assigned_title: str,
) -> None:
    """Notify a newly assigned user and publish completion to the project room.

    Runs after the task has been committed; failures here never undo it.
    """
    payload = None

    assignee_id = task.assigned_to_id
    if assignee_id is not None and assignee_id != previous_assignee and assignee_id != actor.id:
        notify_safely(
            db,
            assignee_id,
            NotificationType.TASK_ASSIGNED,
            assigned_title,
            f'You\'ve been assigned to "{task.title}" in {task.project.name}',
            project_id=task.project_id,
            task_id=task.id,
            triggered_by_id=actor.id,
        )
        payload = to_payload(serialize_task(task))
        await broadcaster.to_user(
            assignee_id,
            "notification",
            {
                "type": NotificationType.TASK_ASSIGNED.value,
                "task": payload,
                "message": f"New task assigned: {task.title}",
            },
        )

    if previous_status is not None and previous_status != TaskStatus.DONE and task.status == TaskStatus.DONE:
        await broadcaster.to_project(
            task.project_id,
            "task_completed",
            {
                "task": payload or to_payload(serialize_task(task)),
                "completedBy": to_payload(summarize_user(actor)),
            },
        )


@router.get("", response_model=ListEnvelope[TaskResponse])
async def list_tasks(
    project: Optional[int] = Query(None),
    status_filter: Optional[TaskStatus] = Query(None, alias="status"),
    assigned_to: Optional[int] = Query(None, alias="assignedTo"),
    due_date: Optional[datetime] = Query(None, alias="dueDate"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Tasks in the current user's projects; ``dueDate`` matches on or before."""
    tasks = task_repo.list_tasks(
        db,
        current_user,
        project_id=project,
        status=status_filter,
        assigned_to=assigned_to,
        due_before=due_date,
    )
    return ListEnvelope(count=len(tasks), data=[serialize_task(task) for task in tasks])


@router.get("/my-tasks", response_model=ListEnvelope[TaskResponse])
async def list_my_tasks(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    tasks = task_repo.list_open_tasks_for(db, current_user.id)
    return ListEnvelope(count=len(tasks), data=[serialize_task(task) for task in tasks])


@router.get("/project/{project_id}", response_model=Envelope[ProjectTasks])
async def list_project_tasks(
    project_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    project = project_repo.get_project(db, project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    ensure_project_member(project, current_user)

    tasks = task_repo.list_tasks(db, current_user, project_id=project.id)
    grouped = task_repo.group_by_status(tasks)
    return Envelope(
        data=ProjectTasks(
            all=[serialize_task(task) for task in tasks],
            by_status={key: [serialize_task(task) for task in items] for key, items in grouped.items()},
        )
    )


@router.get("/{task_id}", response_model=Envelope[TaskResponse])
async def get_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    task = _get_task_or_404(db, task_id)
    ensure_project_member(task.project, current_user, "Not authorized to access this task")
    return Envelope(data=serialize_task(task))


@router.post("", response_model=Envelope[TaskResponse], status_code=status.HTTP_201_CREATED)
async def create_task(
    task_in: TaskCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    project = project_repo.get_project(db, task_in.project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    ensure_project_member(project, current_user, "Not authorized to add tasks to this project")
    _ensure_assignable(db, task_in.assigned_to)

    task = task_repo.create_task(
        db,
        current_user,
        project_id=project.id,
        title=task_in.title,
        description=task_in.description,
        status=task_in.status,
        priority=task_in.priority,
        assigned_to=task_in.assigned_to,
        due_date=task_in.due_date,
        order=task_in.order,
        tags=task_in.tags,
    )
    await _announce_task(db, broadcaster, task, current_user, None, None, "New Task Assigned")

    return Envelope(data=serialize_task(task), message="Task created successfully")


@router.put("/{task_id}", response_model=Envelope[TaskResponse])
async def update_task(
    task_id: int,
    task_update: TaskUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    task = _get_task_or_404(db, task_id)
    ensure_project_member(task.project, current_user, "Not authorized to update this task")

    changes = task_update.model_dump(exclude_unset=True)
    if "assigned_to" in changes:
        _ensure_assignable(db, changes["assigned_to"])

    previous_assignee, previous_status = task.assigned_to_id, task.status
    task = task_repo.update_task(db, task, changes)
    await _announce_task(db, broadcaster, task, current_user, previous_assignee, previous_status, "Task Assigned")

    return Envelope(data=serialize_task(task), message="Task updated successfully")


@router.patch("/{task_id}/toggle", response_model=Envelope[TaskResponse])
async def toggle_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    """Advance the task along new -> in_progress -> done -> new."""
    task = _get_task_or_404(db, task_id)
    ensure_project_member(task.project, current_user, "Not authorized to update this task")

    previous_status = task.status
    task = task_repo.update_task(db, task, {"status": previous_status.next()})
    await _announce_task(db, broadcaster, task, current_user, task.assigned_to_id, previous_status, "Task Assigned")

    return Envelope(data=serialize_task(task))


@router.delete("/{task_id}", response_model=Envelope[None])
async def delete_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    task = _get_task_or_404(db, task_id)
    if not (current_user.is_admin or task.created_by_id == current_user.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to delete this task")

    task_repo.delete_task(db, task)
    logger.info("User %s deleted task %s", current_user.id, task_id)
    return Envelope(message="Task deleted successfully")
