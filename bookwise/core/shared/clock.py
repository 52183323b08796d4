"""
Time helpers shared by the scheduling services.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime, tzinfo

import pytz

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def get_timezone(name: str | None) -> tzinfo:
    """pytz timezone by IANA name; unknown or empty names fall back to UTC."""
    if not name:
        return pytz.UTC
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        logger.warning(f"Unknown timezone '{name}', falling back to UTC")
        return pytz.UTC


def localize(timezone: tzinfo, naive: datetime) -> datetime:
    """Attach ``timezone`` to a naive wall-clock datetime (DST aware for pytz zones)."""
    pytz_localize = getattr(timezone, "localize", None)
    if pytz_localize is not None:
        return pytz_localize(naive)
    return naive.replace(tzinfo=timezone)
