"""Timezone utilities for the clinic's single local timezone"""
import os
from datetime import date, datetime
import pytz

# Single-site operation: every "today" and "now" is taken in this zone
CLINIC_TZ = pytz.timezone(os.getenv("CLINIC_TIMEZONE", "America/Sao_Paulo"))


def clinic_now() -> datetime:
    """Current wall-clock time at the clinic, as a naive datetime."""
    return datetime.now(pytz.utc).astimezone(CLINIC_TZ).replace(tzinfo=None)


def clinic_today() -> date:
    """Current calendar date at the clinic."""
    return clinic_now().date()


def convert_to_clinic(dt: datetime | None) -> datetime | None:
    """
    Convert a datetime to naive clinic local time for API display.

    Args:
        dt: Naive datetime assumed to be in UTC, aware datetime, or None

    Returns:
        Naive datetime in the clinic timezone, or None if input is None
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        # Assume it's UTC and convert to the clinic zone
        utc_dt = pytz.utc.localize(dt)
        local_dt = utc_dt.astimezone(CLINIC_TZ)
        # Return as naive local datetime
        return local_dt.replace(tzinfo=None)
    return dt.astimezone(CLINIC_TZ).replace(tzinfo=None)


def convert_to_utc(dt: datetime | None) -> datetime | None:
    """Convert a naive clinic-local datetime to naive UTC for storage."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = CLINIC_TZ.localize(dt)
    return dt.astimezone(pytz.utc).replace(tzinfo=None)
