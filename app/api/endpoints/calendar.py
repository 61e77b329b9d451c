from fastapi import APIRouter, Depends, Query, status
from typing import Optional
from supabase import Client

from app.api.deps import require_record_id, storage_errors
from app.core.calendar_utils import (
    color_for_type,
    day_window,
    month_window,
    overlap_filter,
    start_of_day,
    to_storage,
)
from app.core.config import get_settings
from app.core.exceptions import NotFoundError
from app.core.logging_config import get_logger
from app.core.security import get_current_admin
from app.core.supabase import get_db
from app.models.calendar import (
    CalendarEventCreate,
    CalendarEventEnvelope,
    CalendarEventListEnvelope,
    CalendarEventResponse,
    CalendarEventUpdate,
)
from app.models.common import MessageResponse

logger = get_logger(__name__)
router = APIRouter()

UPCOMING_COUNT = 10
NOT_FOUND = "Event not found"


def _events(db: Client):
    return db.table(get_settings().CALENDAR_TABLE)


def _items(rows) -> list:
    return [CalendarEventResponse.model_validate(row) for row in rows]


@router.get("", response_model=CalendarEventListEnvelope)
def list_events(
    year: Optional[int] = Query(None, ge=1, le=9998),
    month: Optional[int] = Query(None, ge=1, le=12),
    type: Optional[str] = Query(None),
    db: Client = Depends(get_db)
):
    """Active events, optionally limited to one month and one type"""
    with storage_errors("Server error", "EVENT_FETCH_ERROR"):
        query = _events(db).select("*").eq("is_active", True)

        # A month needs both parts; a lone year or month is ignored
        if year is not None and month is not None:
            window = month_window(year, month, get_settings().tz)
            query = query.or_(overlap_filter(window))

        if type and type != "all":
            query = query.eq("type", type)

        response = query.order("start_date").execute()
        return CalendarEventListEnvelope(events=_items(response.data))


@router.get("/today", response_model=CalendarEventListEnvelope)
def todays_events(db: Client = Depends(get_db)):
    """Events happening today, including multi-day events already under way"""
    with storage_errors("Server error", "EVENT_FETCH_ERROR"):
        window = day_window(tz=get_settings().tz)
        response = (
            _events(db).select("*")
            .eq("is_active", True)
            .or_(overlap_filter(window))
            .order("start_date")
            .execute()
        )
        return CalendarEventListEnvelope(events=_items(response.data))


@router.get("/upcoming", response_model=CalendarEventListEnvelope)
def upcoming_events(db: Client = Depends(get_db)):
    """Next events starting today or later"""
    with storage_errors("Server error", "EVENT_FETCH_ERROR"):
        today = start_of_day(tz=get_settings().tz)
        response = (
            _events(db).select("*")
            .eq("is_active", True)
            .gte("start_date", to_storage(today))
            .order("start_date")
            .limit(UPCOMING_COUNT)
            .execute()
        )
        return CalendarEventListEnvelope(events=_items(response.data))


@router.get("/admin/all", response_model=CalendarEventListEnvelope)
def list_all_events(
    current_admin: dict = Depends(get_current_admin),
    db: Client = Depends(get_db)
):
    """All events including inactive ones"""
    with storage_errors("Server error", "EVENT_FETCH_ERROR"):
        response = _events(db).select("*").order("start_date").execute()
        return CalendarEventListEnvelope(events=_items(response.data))


@router.post("", response_model=CalendarEventEnvelope, status_code=status.HTTP_201_CREATED)
def create_event(
    event_data: CalendarEventCreate,
    current_admin: dict = Depends(get_current_admin),
    db: Client = Depends(get_db)
):
    """Create a new event"""
    event_record = event_data.model_dump(mode="json")
    if not event_record.get("color"):
        event_record["color"] = color_for_type(event_record["type"])

    with storage_errors("Error creating event", "EVENT_CREATE_ERROR"):
        response = _events(db).insert(event_record).execute()
        event = CalendarEventResponse.model_validate(response.data[0])

    logger.info(f"Event {event.id} ({event.type}) created by {current_admin['username']}")
    return CalendarEventEnvelope(message="Event created successfully", event=event)


@router.put("/{event_id}", response_model=CalendarEventEnvelope)
def update_event(
    event_id: str,
    event_data: CalendarEventUpdate,
    current_admin: dict = Depends(get_current_admin),
    db: Client = Depends(get_db)
):
    """Update an event"""
    require_record_id(event_id, NOT_FOUND)
    update_data = event_data.changes()

    with storage_errors("Error updating event", "EVENT_UPDATE_ERROR"):
        if update_data:
            response = _events(db).update(update_data).eq("id", event_id).execute()
        else:
            response = _events(db).select("*").eq("id", event_id).execute()

        if not response.data:
            raise NotFoundError(NOT_FOUND, error_code="EVENT_NOT_FOUND")
        event = CalendarEventResponse.model_validate(response.data[0])

    logger.info(f"Event {event_id} updated by {current_admin['username']}: {sorted(update_data)}")
    return CalendarEventEnvelope(message="Event updated successfully", event=event)


@router.delete("/{event_id}", response_model=MessageResponse)
def delete_event(
    event_id: str,
    current_admin: dict = Depends(get_current_admin),
    db: Client = Depends(get_db)
):
    """Delete an event permanently"""
    require_record_id(event_id, NOT_FOUND)
    with storage_errors("Error deleting event", "EVENT_DELETE_ERROR"):
        response = _events(db).delete().eq("id", event_id).execute()

        if not response.data:
            raise NotFoundError(NOT_FOUND, error_code="EVENT_NOT_FOUND")

    logger.info(f"Event {event_id} deleted by {current_admin['username']}")
    return MessageResponse(message="Event deleted successfully")
