"""
Shared model pieces for the portal API.

Stored columns are snake_case; JSON on the wire is camelCase. Every model
accepts either spelling on input and emits camelCase through FastAPI's
``response_model`` serialization.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, ClassVar, FrozenSet, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from app.core.config import get_settings


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        from_attributes=True,
    )


class TargetAudience(str, Enum):
    ALL = "all"
    STUDENTS = "students"
    TEACHERS = "teachers"
    PARENTS = "parents"
    STAFF = "staff"


def default_audience() -> List[TargetAudience]:
    return [TargetAudience.ALL]


def unique_audience(values: List[TargetAudience]) -> List[TargetAudience]:
    """Target audience is a set; drop repeats but keep the submitted order."""
    return list(dict.fromkeys(values))


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive timestamps are read in the portal time zone, then stored as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=get_settings().tz)
    return value.astimezone(timezone.utc)


AudienceList = Annotated[List[TargetAudience], Field(min_length=1), AfterValidator(unique_audience)]
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class PartialUpdate(CamelModel):
    """Base for PUT payloads: every field optional, but required columns may not be nulled."""

    non_nullable: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="after")
    def _reject_nulls(self):
        nulled = sorted(
            name for name in self.model_fields_set
            if name in self.non_nullable and getattr(self, name) is None
        )
        if nulled:
            raise ValueError(f"{', '.join(to_camel(name) for name in nulled)} cannot be null")
        return self

    def changes(self) -> dict:
        """Storage-ready dict holding only the fields the client sent."""
        return self.model_dump(mode="json", exclude_unset=True)


class MessageResponse(CamelModel):
    success: bool = True
    message: str
