"""
Common I/O building blocks.

Every schema exchanged over HTTP derives from ``APIModel`` so payloads use
camelCase keys while Python code keeps snake_case attribute names.
"""

from __future__ import annotations

from datetime import time
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

# Wall-clock time rendered as HH:MM
ClockTime = Annotated[time, PlainSerializer(lambda value: value.strftime("%H:%M"), return_type=str)]


class APIModel(BaseModel):
    """Base schema: camelCase on the wire, attribute access by field name."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )


class Pagination(APIModel):
    """Offset pagination block returned by list endpoints."""

    total: int
    limit: int
    offset: int
    has_more: bool

    @classmethod
    def build(cls, total: int, limit: int, offset: int) -> "Pagination":
        return cls(total=total, limit=limit, offset=offset, has_more=offset + limit < total)


class PagePagination(APIModel):
    """Page-number pagination block used by the admin console and assistant chat."""

    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "PagePagination":
        return cls(page=page, limit=limit, total=total, pages=(total + limit - 1) // limit if limit else 0)


class MessageResponse(APIModel):
    """Plain acknowledgement."""

    message: str = Field(description="Human-readable outcome")
