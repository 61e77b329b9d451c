"""
News API Endpoints

Reads are public and only ever see active items. Writes need an admin token;
deleting archives the item instead of removing it.
"""

from fastapi import APIRouter, Depends, Query, status
from typing import Optional
from postgrest.exceptions import APIError
from supabase import Client

from app.api.deps import require_record_id, storage_errors, total_pages
from app.core.config import get_settings
from app.core.exceptions import NotFoundError
from app.core.logging_config import get_logger
from app.core.security import get_current_admin
from app.core.supabase import get_db
from app.models.common import MessageResponse
from app.models.news import (
    NewsCreate,
    NewsEnvelope,
    NewsListEnvelope,
    NewsPageEnvelope,
    NewsResponse,
    NewsSavedEnvelope,
    NewsUpdate,
)

logger = get_logger(__name__)
router = APIRouter()

LATEST_COUNT = 5
NOT_FOUND = "News not found"
RANGE_NOT_SATISFIABLE = "PGRST103"


def _news(db: Client):
    return db.table(get_settings().NEWS_TABLE)


def _items(rows) -> list:
    return [NewsResponse.model_validate(row) for row in rows]


def _active_news(db: Client, category: Optional[str], columns: str = "*"):
    query = _news(db).select(columns, count="exact").eq("is_active", True)
    if category and category != "all":
        query = query.eq("category", category)
    return query


@router.get("", response_model=NewsPageEnvelope)
def list_news(
    category: Optional[str] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    page: int = Query(1, ge=1),
    db: Client = Depends(get_db)
):
    """List active news, newest first, one page at a time"""
    offset = (page - 1) * limit

    with storage_errors("Server error", "NEWS_FETCH_ERROR"):
        try:
            response = (
                _active_news(db, category)
                .order("created_at", desc=True)
                .range(offset, offset + limit - 1)
                .execute()
            )
            items = _items(response.data)
        except APIError as e:
            if e.code != RANGE_NOT_SATISFIABLE:
                raise
            # Page starts past the last item: empty page, but still report the total
            response = _active_news(db, category, "id").limit(1).execute()
            items = []

        total = response.count or 0

        return NewsPageEnvelope(
            news=items,
            total=total,
            page=page,
            total_pages=total_pages(total, limit)
        )


@router.get("/latest", response_model=NewsListEnvelope)
def latest_news(db: Client = Depends(get_db)):
    """Latest active news for the notification ticker"""
    with storage_errors("Server error", "NEWS_FETCH_ERROR"):
        response = (
            _news(db).select("*")
            .eq("is_active", True)
            .order("created_at", desc=True)
            .limit(LATEST_COUNT)
            .execute()
        )
        return NewsListEnvelope(news=_items(response.data))


@router.get("/admin/all", response_model=NewsListEnvelope)
def list_all_news(
    current_admin: dict = Depends(get_current_admin),
    db: Client = Depends(get_db)
):
    """All news including archived items"""
    with storage_errors("Server error", "NEWS_FETCH_ERROR"):
        response = _news(db).select("*").order("created_at", desc=True).execute()
        return NewsListEnvelope(news=_items(response.data))


@router.get("/{news_id}", response_model=NewsEnvelope)
def get_news(news_id: str, db: Client = Depends(get_db)):
    """Get a single active news item"""
    require_record_id(news_id, NOT_FOUND)
    with storage_errors("Server error", "NEWS_FETCH_ERROR"):
        response = _news(db).select("*").eq("id", news_id).execute()

        if not response.data or not response.data[0].get("is_active"):
            raise NotFoundError(NOT_FOUND, error_code="NEWS_NOT_FOUND")

        return NewsEnvelope(news=NewsResponse.model_validate(response.data[0]))


@router.post("", response_model=NewsSavedEnvelope, status_code=status.HTTP_201_CREATED)
def create_news(
    news_data: NewsCreate,
    current_admin: dict = Depends(get_current_admin),
    db: Client = Depends(get_db)
):
    """Publish a news item"""
    with storage_errors("Error creating news", "NEWS_CREATE_ERROR"):
        response = _news(db).insert(news_data.model_dump(mode="json")).execute()
        news = NewsResponse.model_validate(response.data[0])

    logger.info(f"News {news.id} created by {current_admin['username']}")
    return NewsSavedEnvelope(message="News created successfully", news=news)


@router.put("/{news_id}", response_model=NewsSavedEnvelope)
def update_news(
    news_id: str,
    news_data: NewsUpdate,
    current_admin: dict = Depends(get_current_admin),
    db: Client = Depends(get_db)
):
    """Update fields of a news item"""
    require_record_id(news_id, NOT_FOUND)
    update_data = news_data.changes()

    with storage_errors("Error updating news", "NEWS_UPDATE_ERROR"):
        if update_data:
            response = _news(db).update(update_data).eq("id", news_id).execute()
        else:
            response = _news(db).select("*").eq("id", news_id).execute()

        if not response.data:
            raise NotFoundError(NOT_FOUND, error_code="NEWS_NOT_FOUND")
        news = NewsResponse.model_validate(response.data[0])

    logger.info(f"News {news_id} updated by {current_admin['username']}: {sorted(update_data)}")
    return NewsSavedEnvelope(message="News updated successfully", news=news)


@router.delete("/{news_id}", response_model=MessageResponse)
def archive_news(
    news_id: str,
    current_admin: dict = Depends(get_current_admin),
    db: Client = Depends(get_db)
):
    """Archive a news item; the record stays in storage"""
    require_record_id(news_id, NOT_FOUND)
    with storage_errors("Error archiving news", "NEWS_ARCHIVE_ERROR"):
        response = _news(db).update({"is_active": False}).eq("id", news_id).execute()

        if not response.data:
            raise NotFoundError(NOT_FOUND, error_code="NEWS_NOT_FOUND")

    logger.info(f"News {news_id} archived by {current_admin['username']}")
    return MessageResponse(message="News archived successfully")
