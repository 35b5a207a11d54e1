"""Response envelope shared by every endpoint."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class MessageResponse(BaseModel):
    """Envelope without a payload."""

    success: bool = True
    message: str


class ApiResponse(MessageResponse, Generic[T]):
    """Envelope with a typed payload."""

    data: T


class FieldError(BaseModel):
    """One per-field validation complaint."""

    field: str
    message: str


class ErrorResponse(BaseModel):
    """Failure envelope rendered by the exception handlers."""

    success: bool = False
    message: str
    errors: list[FieldError] | None = None


class Pagination(BaseModel):
    """Page metadata for list endpoints."""

    current_page: int
    total_pages: int
    total_orders: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = (total + limit - 1) // limit if limit else 0
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_orders=total,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )
