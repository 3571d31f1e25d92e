"""Schemas for user notifications"""
from datetime import datetime
from typing import List, Optional

from teamspace.models import NotificationType
from teamspace.schemas.base import APIModel, Pagination
from teamspace.schemas.user import UserSummary


class NotificationProject(APIModel):
    id: int
    name: str


class NotificationTask(APIModel):
    id: int
    title: str


class NotificationResponse(APIModel):
    id: int
    type: NotificationType
    title: str
    message: str
    project_id: Optional[int] = None
    task_id: Optional[int] = None
    project: Optional[NotificationProject] = None
    task: Optional[NotificationTask] = None
    triggered_by: Optional[UserSummary] = None
    read: bool
    read_at: Optional[datetime] = None
    created_at: datetime


class NotificationPage(APIModel):
    success: bool = True
    data: List[NotificationResponse]
    unread_count: int
    pagination: Pagination


class UnreadCount(APIModel):
    count: int
