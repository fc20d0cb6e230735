"""Common Pydantic schemas used across the API."""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ResponseMeta(BaseModel):
    """Metadata included in list responses."""

    count: int = 0
    limit: Optional[int] = None


class ApiResponse(BaseModel, Generic[T]):
    """Standard API response envelope."""

    status: str = "success"
    data: T
    meta: Optional[ResponseMeta] = None


class ErrorDetail(BaseModel):
    """Error detail for error responses."""

    code: str
    message: str
    supported: Optional[list[str]] = None


class ErrorResponse(BaseModel):
    """Standard API error response."""

    status: str = "error"
    error: ErrorDetail
