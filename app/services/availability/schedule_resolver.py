# app/services/availability/schedule_resolver.py
"""
Resolves the open time ranges of a professional for one calendar date.

Precedence, highest first:
1. any covering "unavailable" override closes the day
2. a covering "available" override with explicit hours replaces business hours;
   when several qualify the narrowest date range wins, then the newest
3. a covering "available" override without hours leaves the day closed
4. otherwise the tenant's business hours for the weekday
"""
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from app.models.schedule_override import ScheduleOverride
from app.schemas.availability import TimeRange
from app.utils.time_ranges import day_name

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def normalize_day_hours(day_hours: Any) -> List[TimeRange]:
    """
    Accept both stored shapes of a business-hours day:
    a list of {start, end} ranges, or a single {start, end, enabled} object.
    Disabled or malformed entries are skipped.
    """
    if not day_hours:
        return []

    entries = day_hours if isinstance(day_hours, list) else [day_hours]

    ranges = []
    for entry in entries:
        if not isinstance(entry, dict) or entry.get("enabled") is False:
            continue
        try:
            ranges.append(TimeRange(start=entry["start"], end=entry["end"]))
        except (KeyError, ValidationError):
            logger.warning(f"Ignoring malformed business hours entry: {entry!r}")
    return ranges


def _created_at(override: ScheduleOverride) -> datetime:
    created = override.created_at
    if created is None:
        return _EPOCH
    return created if created.tzinfo else created.replace(tzinfo=timezone.utc)


class ScheduleResolver:
    """Stateless; all inputs are passed per call"""

    @staticmethod
    def select_override(
            overrides: Sequence[ScheduleOverride],
            day: date
    ) -> Optional[ScheduleOverride]:
        """Pick the single override that governs the day, or None"""
        covering = [o for o in overrides if o.covers(day)]
        if not covering:
            return None

        unavailable = [o for o in covering if o.is_unavailable]
        if unavailable:
            return unavailable[0]

        def precedence(override: ScheduleOverride):
            span = (override.end_date - override.start_date).days
            return (
                0 if override.has_hours else 1,
                span,
                -_created_at(override).timestamp(),
                override.start_time or "",
            )

        return sorted(covering, key=precedence)[0]

    @staticmethod
    def resolve(
            business_hours: Optional[Dict[str, Any]],
            overrides: Sequence[ScheduleOverride],
            day: date
    ) -> List[TimeRange]:
        override = ScheduleResolver.select_override(overrides, day)

        if override is not None:
            if override.is_unavailable:
                return []
            if override.has_hours:
                return [TimeRange(start=override.start_time, end=override.end_time)]
            return []

        return normalize_day_hours((business_hours or {}).get(day_name(day)))
