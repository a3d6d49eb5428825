# app/utils/time_ranges.py
"""
Clock-time helpers shared by the availability engine.

Business hours and overrides are expressed as "HH:MM" strings; the engine works
in minutes from midnight and compares intervals as half-open [start, end).
"""
import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

DAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


def parse_time_to_minutes(value: str) -> int:
    """Parse "HH:MM" (seconds are ignored) into minutes from midnight."""
    parts = value.strip().split(":")
    hours = int(parts[0]) if parts[0] else 0
    minutes = int(parts[1]) if len(parts) > 1 and parts[1] else 0
    return hours * 60 + minutes


def format_minutes_to_time(minutes: int) -> str:
    """Format minutes from midnight as "HH:MM"."""
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


def intervals_overlap(a_start, a_end, b_start, b_end) -> bool:
    """True when [a_start, a_end) and [b_start, b_end) share any instant."""
    return a_start < b_end and a_end > b_start


def day_name(day: date) -> str:
    """Lower-case weekday name as stored in tenant business hours."""
    return DAY_NAMES[day.weekday()]


def as_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime. Naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_utc(value: datetime, zone: ZoneInfo) -> datetime:
    """Aware UTC datetime; naive values are wall-clock time in the given zone"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=zone)
    return as_utc(value)


def add_minutes(value: datetime, minutes: int) -> datetime:
    return value + timedelta(minutes=minutes)


def date_range(start: date, days: int) -> Iterable[date]:
    for offset in range(days):
        yield start + timedelta(days=offset)


def resolve_zone(name: Optional[str], default: str = "UTC") -> ZoneInfo:
    """ZoneInfo for a tenant timezone name; unknown names fall back to the default"""
    try:
        return ZoneInfo(name or default)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {name!r}, falling back to {default}")
        return ZoneInfo(default)


def local_instant(day: date, minutes: int, zone: ZoneInfo) -> datetime:
    """UTC instant of a wall-clock offset (minutes from midnight) on a local date"""
    midnight = datetime.combine(day, time.min, tzinfo=zone)
    return as_utc(midnight + timedelta(minutes=minutes))


def local_day_window(day: date, zone: ZoneInfo) -> Tuple[datetime, datetime]:
    """UTC [start, end) of a local calendar day"""
    start = datetime.combine(day, time.min, tzinfo=zone)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=zone)
    return as_utc(start), as_utc(end)


def local_dates_touched(start: datetime, end: datetime, zone: ZoneInfo) -> List[date]:
    """Local calendar dates covered by the half-open interval [start, end)"""
    first = as_utc(start).astimezone(zone).date()
    last = (as_utc(end) - timedelta(microseconds=1)).astimezone(zone).date()
    if last < first:
        last = first
    return list(date_range(first, (last - first).days + 1))
