from pydantic import Field, field_validator, model_validator
from typing import ClassVar, FrozenSet, List, Optional
from datetime import datetime
from enum import Enum

from app.models.common import (
    AudienceList,
    CamelModel,
    PartialUpdate,
    UtcDatetime,
    default_audience,
)

HEX_COLOR = r"^#(?:[0-9a-fA-F]{3}){1,2}$"


class EventType(str, Enum):
    EXAM = "exam"
    HOLIDAY = "holiday"
    EVENT = "event"
    DEADLINE = "deadline"
    MEETING = "meeting"
    SPORTS = "sports"


class RecurrenceFrequency(str, Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Recurring(CamelModel):
    """Stored as metadata only; occurrences are never expanded."""
    frequency: RecurrenceFrequency = RecurrenceFrequency.NONE
    end_date: Optional[UtcDatetime] = None


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _check_range(start: Optional[datetime], end: Optional[datetime]) -> None:
    if start is not None and end is not None and end < start:
        raise ValueError("endDate must not be earlier than startDate")


class CalendarEventCreate(CamelModel):
    """Schema for creating an event; colour defaults by type when omitted."""
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    type: EventType
    start_date: UtcDatetime
    end_date: Optional[UtcDatetime] = None
    all_day: bool = True
    color: Optional[str] = Field(None, pattern=HEX_COLOR)
    location: Optional[str] = None
    target_audience: AudienceList = Field(default_factory=default_audience)
    recurring: Recurring = Field(default_factory=Recurring)
    created_by: str = "Administrator"
    is_active: bool = True

    _blank_color = field_validator("color", mode="before")(_blank_to_none)

    @model_validator(mode="after")
    def _validate_dates(self):
        _check_range(self.start_date, self.end_date)
        return self


class CalendarEventUpdate(PartialUpdate):
    """Schema for updating an event - all fields optional"""
    non_nullable: ClassVar[FrozenSet[str]] = frozenset({
        "title", "type", "start_date", "all_day", "color",
        "target_audience", "recurring", "created_by", "is_active",
    })

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    type: Optional[EventType] = None
    start_date: Optional[UtcDatetime] = None
    end_date: Optional[UtcDatetime] = None
    all_day: Optional[bool] = None
    color: Optional[str] = Field(None, pattern=HEX_COLOR)
    location: Optional[str] = None
    target_audience: Optional[AudienceList] = None
    recurring: Optional[Recurring] = None
    created_by: Optional[str] = None
    is_active: Optional[bool] = None

    @model_validator(mode="after")
    def _validate_dates(self):
        _check_range(self.start_date, self.end_date)
        return self


class CalendarEventResponse(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    type: str
    start_date: datetime
    end_date: Optional[datetime] = None
    all_day: bool = True
    color: str
    location: Optional[str] = None
    target_audience: List[str]
    recurring: Recurring = Field(default_factory=Recurring)
    created_by: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CalendarEventEnvelope(CamelModel):
    success: bool = True
    message: str
    event: CalendarEventResponse


class CalendarEventListEnvelope(CamelModel):
    success: bool = True
    events: List[CalendarEventResponse]
