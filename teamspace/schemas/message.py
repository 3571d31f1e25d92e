"""Schemas for project chat messages"""
from datetime import datetime
from typing import List, Optional

from pydantic import StringConstraints
from typing_extensions import Annotated

from teamspace.schemas.base import APIModel
from teamspace.schemas.user import UserSummary

Content = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class MessageCreate(APIModel):
    project_id: int
    content: Content


class MessageUpdate(APIModel):
    content: Content


class MessageResponse(APIModel):
    id: int
    project_id: int
    sender: UserSummary
    user_id: int
    user_name: str
    content: str
    mentions: List[int]
    is_edited: bool
    edited_at: Optional[datetime] = None
    is_deleted: bool
    timestamp: datetime
    created_at: datetime
    updated_at: datetime
