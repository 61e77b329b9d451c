"""Helpers shared by the endpoint modules."""
import math
from contextlib import contextmanager
from uuid import UUID

from app.core.exceptions import DatabaseError, NotFoundError, SchoolPortalException
from app.core.logging_config import get_logger

logger = get_logger(__name__)


def require_record_id(record_id: str, not_found_message: str) -> str:
    """Storage ids are UUIDs; anything else cannot match a record."""
    try:
        UUID(record_id)
    except ValueError:
        raise NotFoundError(not_found_message, error_code="NOT_FOUND")
    return record_id


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


@contextmanager
def storage_errors(message: str, error_code: str):
    """Turn unexpected storage failures into a DatabaseError (500).

    Application exceptions raised inside the block pass through unchanged.
    """
    try:
        yield
    except SchoolPortalException:
        raise
    except Exception as e:
        logger.exception(f"{message}: {type(e).__name__}")
        raise DatabaseError(message, error_code=error_code, details={"reason": str(e)})
