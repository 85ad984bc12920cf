"""Datetime utility functions."""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from backoffice.config import settings

# Timezone for API responses and document numbering scopes (from config)
API_TIMEZONE = ZoneInfo(settings.timezone)


def to_api_timezone(dt: datetime | None) -> datetime | None:
    """Convert a datetime to API timezone (from config).

    Args:
        dt: Datetime to convert (can be None)

    Returns:
        Datetime in API timezone, or None if input was None
    """
    if dt is None:
        return None
    # Ensure datetime is timezone-aware (assume UTC if naive)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(API_TIMEZONE)


def current_year() -> int:
    """Calendar year in the business timezone, used as the document number scope."""
    return datetime.now(API_TIMEZONE).year
