"""Teamspace Database Models"""
from teamspace.models.lifecycle import InvalidTransition, RecordState
from teamspace.models.user import User, UserRole
from teamspace.models.project_member import ProjectMember, MemberRole
from teamspace.models.project import Project, ProjectCategory, ProjectStatus
from teamspace.models.task import Task, TaskStatus, TaskPriority
from teamspace.models.message import Message, DELETED_PLACEHOLDER
from teamspace.models.notification import Notification, NotificationType
from teamspace.models.file import ProjectFile

__all__ = [
    "InvalidTransition",
    "RecordState",
    "User",
    "UserRole",
    "ProjectMember",
    "MemberRole",
    "Project",
    "ProjectCategory",
    "ProjectStatus",
    "Task",
    "TaskStatus",
    "TaskPriority",
    "Message",
    "DELETED_PLACEHOLDER",
    "Notification",
    "NotificationType",
    "ProjectFile",
]
