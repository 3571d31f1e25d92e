"""Schemas for project members"""
from datetime import datetime

from teamspace.models import MemberRole
from teamspace.schemas.base import APIModel
from teamspace.schemas.user import UserSummary


class ProjectMemberResponse(APIModel):
    user: UserSummary
    role: MemberRole
    added_at: datetime


class MemberAdd(APIModel):
    user_id: int
