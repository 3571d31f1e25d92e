"""Schemas for tasks"""
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field, StringConstraints
from typing_extensions import Annotated

from teamspace.models import TaskPriority, TaskStatus
from teamspace.schemas.base import APIModel
from teamspace.schemas.project import ProjectSummary
from teamspace.schemas.user import UserSummary

Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=500)]
Description = Annotated[str, StringConstraints(strip_whitespace=True)]


class TaskCreate(APIModel):
    project_id: int
    title: Title
    description: Description = ""
    status: TaskStatus = TaskStatus.NEW
    priority: TaskPriority = TaskPriority.MEDIUM
    assigned_to: Optional[int] = None
    due_date: Optional[datetime] = None
    order: int = 0
    tags: List[str] = Field(default_factory=list)


class TaskUpdate(APIModel):
    title: Optional[Title] = None
    description: Optional[Description] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assigned_to: Optional[int] = None
    due_date: Optional[datetime] = None
    order: Optional[int] = None
    tags: Optional[List[str]] = None


class TaskResponse(APIModel):
    id: int
    project_id: int
    project: ProjectSummary
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    assigned_to: Optional[int] = None
    assignee: Optional[UserSummary] = None
    assignee_name: Optional[str] = None
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    is_overdue: bool
    created_by: UserSummary
    order: int
    tags: List[str]
    created_at: datetime
    updated_at: datetime


class ProjectTasks(APIModel):
    all: List[TaskResponse]
    by_status: Dict[str, List[TaskResponse]]
