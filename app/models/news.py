"""
News Models for the School Portal API
"""

from pydantic import Field
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


class NewsCategory(str, Enum):
    GENERAL = "general"
    EXAM = "exam"
    HOLIDAY = "holiday"
    EVENT = "event"
    ANNOUNCEMENT = "announcement"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Attachment(CamelModel):
    filename: Optional[str] = None
    url: Optional[str] = None
    file_type: Optional[str] = None


class NewsCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    category: NewsCategory = NewsCategory.GENERAL
    priority: Priority = Priority.MEDIUM
    target_audience: AudienceList = Field(default_factory=default_audience)
    attachments: List[Attachment] = Field(default_factory=list)
    published_by: str = "Administrator"
    is_active: bool = True
    expiry_date: Optional[UtcDatetime] = None
    notification_sent: bool = False


class NewsUpdate(PartialUpdate):
    non_nullable: ClassVar[FrozenSet[str]] = frozenset({
        "title", "content", "category", "priority", "target_audience",
        "attachments", "published_by", "is_active", "notification_sent",
    })

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1)
    category: Optional[NewsCategory] = None
    priority: Optional[Priority] = None
    target_audience: Optional[AudienceList] = None
    attachments: Optional[List[Attachment]] = None
    published_by: Optional[str] = None
    is_active: Optional[bool] = None
    expiry_date: Optional[UtcDatetime] = None
    notification_sent: Optional[bool] = None


class NewsResponse(CamelModel):
    id: str
    title: str
    content: str
    category: str
    priority: str
    target_audience: List[str]
    attachments: List[Attachment] = Field(default_factory=list)
    published_by: str
    is_active: bool
    expiry_date: Optional[datetime] = None
    notification_sent: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None


class NewsEnvelope(CamelModel):
    success: bool = True
    news: NewsResponse


class NewsSavedEnvelope(NewsEnvelope):
    message: str


class NewsListEnvelope(CamelModel):
    success: bool = True
    news: List[NewsResponse]


class NewsPageEnvelope(NewsListEnvelope):
    total: int
    page: int
    total_pages: int
