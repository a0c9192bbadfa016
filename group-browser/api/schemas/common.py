"""Common schema models shared across the API."""

from typing import Optional
from pydantic import BaseModel


class PaginationMeta(BaseModel):
    """Pagination metadata for list responses."""
    total: int
    returned: int
    page: int
    page_size: int
    has_more: bool


class ErrorDetail(BaseModel):
    """Body of an error response."""
    error: str
    message: str
    retryable: bool = False
    field: Optional[str] = None
