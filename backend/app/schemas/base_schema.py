from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire; either is accepted on input."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ResponseMetadata(CamelModel):
    page: Optional[int] = None
    size: Optional[int] = None
    total: Optional[int] = None
    sort: Optional[str] = None
    filter: Optional[str] = None


class ApiResponse(CamelModel, Generic[T]):
    """Envelope returned by every endpoint"""
    status: str
    data: Optional[T] = None
    message: Optional[str] = None
    metadata: Optional[ResponseMetadata] = None

    @classmethod
    def success(cls, data: Any = None, message: Optional[str] = None, metadata: Optional[ResponseMetadata] = None):
        return cls(status="success", data=data, message=message, metadata=metadata)

    @classmethod
    def error(cls, message: str):
        return cls(status="error", data=None, message=message)


class PageResponse(CamelModel, Generic[T]):
    content: List[T]
    page: int
    size: int
    total_elements: int
    total_pages: int
