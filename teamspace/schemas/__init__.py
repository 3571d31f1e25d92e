"""
Pydantic schemas for request/response validation
"""
from teamspace.schemas.base import APIModel, Envelope, ListEnvelope, PageEnvelope, Pagination
from teamspace.schemas.user import (
    AuthPayload,
    PasswordChange,
    ProfileUpdate,
    UserCreate,
    UserLogin,
    UserRegister,
    UserResponse,
    UserSummary,
    UserUpdate,
)
from teamspace.schemas.project_member import MemberAdd, ProjectMemberResponse
from teamspace.schemas.project import (
    ProjectCreate,
    ProjectDetailResponse,
    ProjectResponse,
    ProjectSummary,
    ProjectUpdate,
)
from teamspace.schemas.task import ProjectTasks, TaskCreate, TaskResponse, TaskUpdate
from teamspace.schemas.message import MessageCreate, MessageResponse, MessageUpdate
from teamspace.schemas.notification import (
    NotificationPage,
    NotificationProject,
    NotificationResponse,
    NotificationTask,
    UnreadCount,
)
from teamspace.schemas.file import ProjectFileResponse, ProjectFileUpdate

__all__ = [
    "APIModel",
    "Envelope",
    "ListEnvelope",
    "PageEnvelope",
    "Pagination",
    "AuthPayload",
    "PasswordChange",
    "ProfileUpdate",
    "UserCreate",
    "UserLogin",
    "UserRegister",
    "UserResponse",
    "UserSummary",
    "UserUpdate",
    "MemberAdd",
    "ProjectMemberResponse",
    "ProjectCreate",
    "ProjectDetailResponse",
    "ProjectResponse",
    "ProjectSummary",
    "ProjectUpdate",
    "ProjectTasks",
    "TaskCreate",
    "TaskResponse",
    "TaskUpdate",
    "MessageCreate",
    "MessageResponse",
    "MessageUpdate",
    "NotificationPage",
    "NotificationProject",
    "NotificationResponse",
    "NotificationTask",
    "UnreadCount",
    "ProjectFileResponse",
    "ProjectFileUpdate",
]
