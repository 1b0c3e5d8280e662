"""Pydantic schemas for tasks.

Learn: Separate schemas for create/update/read keeps the API clean.
- TaskCreate: what you POST to create a task
- TaskUpdate: what you PUT to modify a task (every field optional)
- TaskRead: what the API returns
- TaskStats: the /stats/summary payload

The wire format is camelCase (dueDate, createdAt, _id) to match the
browser client; Python code only ever sees snake_case attributes.
"""

import uuid
from datetime import datetime, timezone
from typing import Annotated, Literal, Optional

from pydantic import (
    AfterValidator,
    AliasGenerator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
)
from pydantic.alias_generators import to_camel

TaskStatus = Literal["pending", "in-progress", "completed"]
TaskPriority = Literal["low", "medium", "high"]
SortBy = Literal["createdAt", "dueDate", "priority", "title"]
SortOrder = Literal["asc", "desc"]


def _as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken as UTC; aware ones are converted to it."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


def _parse_iso8601(value):
    """Due dates arrive as ISO 8601 strings. Numbers are not timestamps here."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValueError("must be an ISO 8601 date string")
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise ValueError("must be an ISO 8601 date string") from None


DueDate = Annotated[datetime, BeforeValidator(_parse_iso8601), AfterValidator(_as_utc)]


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    # Omitted means the default; an explicit null is rejected
    status: TaskStatus = "pending"
    priority: TaskPriority = "medium"
    due_date: Optional[DueDate] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class TaskUpdate(BaseModel):
    """Partial update — only fields present in the body are applied.

    Learn: "absent" and "null" mean different things for dueDate:
    absent leaves it alone, null clears it. model_fields_set tells them
    apart, so routes pass model_dump(exclude_unset=True) to the service.
    """
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[DueDate] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class TaskRead(BaseModel):
    id: uuid.UUID = Field(serialization_alias="_id")
    title: str
    description: Optional[str]
    status: str
    priority: str
    due_date: Optional[UtcDatetime]
    user_id: uuid.UUID
    created_at: UtcDatetime
    updated_at: UtcDatetime

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=AliasGenerator(serialization_alias=to_camel),
    )


class BreakdownEntry(BaseModel):
    id: str = Field(alias="_id")
    count: int


class TaskStats(BaseModel):
    total_tasks: int
    completion_rate: int
    status_breakdown: list[BreakdownEntry]
    priority_breakdown: list[BreakdownEntry]

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(BaseModel):
    message: str
