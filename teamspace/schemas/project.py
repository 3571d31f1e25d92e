"""Schemas for projects"""
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import StringConstraints
from typing_extensions import Annotated

from teamspace.models import ProjectCategory, ProjectStatus
from teamspace.schemas.base import APIModel
from teamspace.schemas.project_member import ProjectMemberResponse
from teamspace.schemas.user import UserSummary

ProjectName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
Description = Annotated[str, StringConstraints(strip_whitespace=True)]


class ProjectCreate(APIModel):
    name: ProjectName
    description: Description = ""
    category: ProjectCategory = ProjectCategory.TECH


class ProjectUpdate(APIModel):
    name: Optional[ProjectName] = None
    description: Optional[Description] = None
    category: Optional[ProjectCategory] = None
    status: Optional[ProjectStatus] = None


class ProjectSummary(APIModel):
    id: int
    name: str
    category: ProjectCategory


class ProjectResponse(APIModel):
    id: int
    name: str
    description: str
    category: ProjectCategory
    status: ProjectStatus
    created_by: UserSummary
    members: List[ProjectMemberResponse]
    member_count: int
    task_count: int
    completed_count: int = 0
    created_at: datetime
    updated_at: datetime


class ProjectDetailResponse(ProjectResponse):
    tasks_by_status: Dict[str, int]
