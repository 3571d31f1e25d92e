"""Shared schema base classes and the response envelope."""
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class APIModel(BaseModel):
    """Schemas travel as camelCase JSON but are built from snake_case attributes."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class Envelope(APIModel, Generic[DataT]):
    success: bool = True
    data: Optional[DataT] = None
    message: Optional[str] = None


class ListEnvelope(APIModel, Generic[DataT]):
    success: bool = True
    count: int
    data: List[DataT]


class Pagination(APIModel):
    total: int
    page: int
    pages: int


class PageEnvelope(APIModel, Generic[DataT]):
    success: bool = True
    data: List[DataT]
    pagination: Pagination
