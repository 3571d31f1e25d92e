"""Schemas for project files"""
from datetime import datetime
from typing import Optional

from pydantic import StringConstraints
from typing_extensions import Annotated

from teamspace.schemas.base import APIModel
from teamspace.schemas.user import UserSummary


class ProjectFileUpdate(APIModel):
    original_name: Optional[Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]] = None
    description: Optional[Annotated[str, StringConstraints(strip_whitespace=True)]] = None


class ProjectFileResponse(APIModel):
    id: int
    project_id: int
    name: str
    original_name: str
    description: str
    url: str
    storage_path: Optional[str] = None
    storage_type: str
    file_type: str
    mime_type: str
    type_category: str
    size: int
    formatted_size: str
    uploaded_by: UserSummary
    created_at: datetime
    updated_at: datetime
