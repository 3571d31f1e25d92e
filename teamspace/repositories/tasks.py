"""Task persistence"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from teamspace.models import Project, ProjectMember, Task, TaskPriority, TaskStatus, User


def _task_query(db: Session):
    return db.query(Task).options(
        selectinload(Task.project),
        selectinload(Task.assignee),
        selectinload(Task.creator),
    )


def get_task(db: Session, task_id: int) -> Optional[Task]:
    return _task_query(db).filter(Task.id == task_id).first()


def list_tasks(
    db: Session,
    user: User,
    project_id: Optional[int] = None,
    status: Optional[TaskStatus] = None,
    assigned_to: Optional[int] = None,
    due_before: Optional[datetime] = None,
) -> List[Task]:
    query = _task_query(db)
    if project_id is not None:
        query = query.filter(Task.project_id == project_id)
    if status is not None:
        query = query.filter(Task.status == status)
    if assigned_to is not None:
        query = query.filter(Task.assigned_to_id == assigned_to)
    if due_before is not None:
        query = query.filter(Task.due_date <= due_before)
    if not user.is_admin:
        query = query.filter(
            Task.project.has(Project.members.any(ProjectMember.user_id == user.id))
        )
    return query.order_by(Task.position.asc(), Task.created_at.desc(), Task.id.desc()).all()


def list_open_tasks_for(db: Session, user_id: int) -> List[Task]:
    return (
        _task_query(db)
        .filter(Task.assigned_to_id == user_id, Task.status != TaskStatus.DONE)
        .order_by(Task.due_date.is_(None), Task.due_date.asc(), Task.created_at.desc(), Task.id.desc())
        .all()
    )


def group_by_status(tasks: List[Task]) -> dict:
    grouped = {status.value: [] for status in TaskStatus}
    for task in tasks:
        grouped[task.status.value].append(task)
    return grouped


def create_task(
    db: Session,
    creator: User,
    project_id: int,
    title: str,
    description: str = "",
    status: TaskStatus = TaskStatus.NEW,
    priority: TaskPriority = TaskPriority.MEDIUM,
    assigned_to: Optional[int] = None,
    due_date: Optional[datetime] = None,
    order: int = 0,
    tags: Optional[List[str]] = None,
) -> Task:
    task = Task(
        project_id=project_id,
        title=title,
        description=description,
        priority=priority,
        assigned_to_id=assigned_to,
        due_date=due_date,
        created_by_id=creator.id,
        position=order,
        tags=list(tags or []),
    )
    task.apply_status(status)
    db.add(task)
    db.commit()
    return get_task(db, task.id)


_TASK_FIELDS = {
    "title": "title",
    "description": "description",
    "priority": "priority",
    "assigned_to": "assigned_to_id",
    "due_date": "due_date",
    "order": "position",
    "tags": "tags",
}


def update_task(db: Session, task: Task, changes: dict) -> Task:
    """Set only the supplied fields; ``assigned_to``/``due_date`` may be cleared with None."""
    for field, column in _TASK_FIELDS.items():
        if field not in changes:
            continue
        value = changes[field]
        if value is None and field not in ("assigned_to", "due_date"):
            continue
        setattr(task, column, list(value) if field == "tags" else value)
    if changes.get("status") is not None:
        task.apply_status(changes["status"])
    db.commit()
    return get_task(db, task.id)


def delete_task(db: Session, task: Task) -> None:
    db.delete(task)
    db.commit()
