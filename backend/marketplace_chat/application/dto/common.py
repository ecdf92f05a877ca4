"""Shared DTO building blocks: canonical timestamps and pagination."""

from datetime import datetime
from typing import Annotated, Any, Generic, TypeVar

from pydantic import BaseModel, BeforeValidator, Field

from marketplace_chat.domain.clock import format_timestamp, parse_timestamp

T = TypeVar("T")


def normalize_timestamp(value: Any) -> Any:
    """Accept datetimes or ISO-8601 strings and emit the canonical UTC string."""
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, str):
        return format_timestamp(parse_timestamp(value))
    return value


Timestamp = Annotated[str, BeforeValidator(normalize_timestamp)]


class Page(BaseModel, Generic[T]):
    items: list[T]
    total: int = Field(ge=0)
    page: int = Field(ge=1)
    page_size: int = Field(ge=1)
    has_more: bool


def build_page(items: list[T], total: int, page: int, page_size: int) -> Page[T]:
    return Page(
        items=items,
        total=total,
        page=page,
        page_size=page_size,
        has_more=page * page_size < total,
    )
