"""Project and membership persistence"""
from typing import Dict, List, Optional, Tuple

from sqlalchemy import case, func
from sqlalchemy.orm import Session, selectinload

from teamspace.models import (
    MemberRole,
    Project,
    ProjectCategory,
    ProjectMember,
    ProjectStatus,
    Task,
    TaskStatus,
    User,
)


def _project_query(db: Session):
    return db.query(Project).options(
        selectinload(Project.created_by),
        selectinload(Project.members).selectinload(ProjectMember.user),
    )


def get_project(db: Session, project_id: int) -> Optional[Project]:
    return _project_query(db).filter(Project.id == project_id).first()


def list_projects(
    db: Session,
    user: User,
    status: Optional[ProjectStatus] = None,
    category: Optional[ProjectCategory] = None,
) -> List[Project]:
    """Projects visible to ``user``; completed projects only when asked for."""
    query = _project_query(db)
    if status is not None:
        query = query.filter(Project.status == status)
    else:
        query = query.filter(Project.status != ProjectStatus.COMPLETED)
    if category is not None:
        query = query.filter(Project.category == category)
    if not user.is_admin:
        query = query.filter(Project.members.any(ProjectMember.user_id == user.id))
    return query.order_by(Project.updated_at.desc(), Project.id.desc()).all()


def task_counts(db: Session, project_ids: List[int]) -> Dict[int, Tuple[int, int]]:
    """Map project id to ``(task_count, completed_count)``."""
    if not project_ids:
        return {}
    rows = (
        db.query(
            Task.project_id,
            func.count(Task.id),
            func.sum(case((Task.status == TaskStatus.DONE, 1), else_=0)),
        )
        .filter(Task.project_id.in_(project_ids))
        .group_by(Task.project_id)
        .all()
    )
    return {project_id: (total, int(done or 0)) for project_id, total, done in rows}


def tasks_by_status(db: Session, project_id: int) -> Dict[str, int]:
    counts = {status.value: 0 for status in TaskStatus}
    rows = (
        db.query(Task.status, func.count(Task.id))
        .filter(Task.project_id == project_id)
        .group_by(Task.status)
        .all()
    )
    for status, count in rows:
        counts[status.value] = count
    return counts


def create_project(
    db: Session,
    creator: User,
    name: str,
    description: str = "",
    category: ProjectCategory = ProjectCategory.TECH,
) -> Project:
    project = Project(
        name=name,
        description=description,
        category=category,
        status=ProjectStatus.ACTIVE,
        created_by_id=creator.id,
    )
    project.members.append(ProjectMember(user_id=creator.id, role=MemberRole.OWNER))
    db.add(project)
    db.commit()
    return get_project(db, project.id)


def update_project(db: Session, project: Project, changes: dict) -> Project:
    """Apply the supplied fields; a status change must be a legal transition."""
    status = changes.pop("status", None)
    for field, value in changes.items():
        if value is not None:
            setattr(project, field, value)
    if status is not None:
        project.transition_to(status)
    db.commit()
    return get_project(db, project.id)


def complete_project(db: Session, project: Project) -> Project:
    project.transition_to(ProjectStatus.COMPLETED)
    db.commit()
    return get_project(db, project.id)


def add_member(db: Session, project: Project, user_id: int, role: MemberRole = MemberRole.MEMBER) -> Project:
    project.members.append(ProjectMember(user_id=user_id, role=role))
    db.commit()
    return get_project(db, project.id)


def remove_member(db: Session, project: Project, user_id: int) -> Project:
    member = project.member_for(user_id)
    if member is not None:
        project.members.remove(member)
        db.commit()
    return get_project(db, project.id)
