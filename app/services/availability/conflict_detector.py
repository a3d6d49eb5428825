# app/services/availability/conflict_detector.py
"""
Answers "is this exact interval free for this professional".

Two entry points share one overlap predicate:
- has_conflict(): bulk check against a pre-fetched list (slot grids)
- is_slot_available(): point check straight against storage (before booking)
"""
import logging
from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID
from zoneinfo import ZoneInfo

from app.config.settings import get_settings
from app.core.exceptions import SlotConflictError, TenantNotFoundError
from app.models.appointment import Appointment
from app.models.schedule_override import OverrideType
from app.repositories.appointment_repository import AppointmentRepository
from app.repositories.schedule_override_repository import ScheduleOverrideRepository
from app.repositories.tenant_repository import TenantRepository
from app.utils.time_ranges import (
    add_minutes,
    as_utc,
    intervals_overlap,
    local_dates_touched,
    resolve_zone,
    to_utc,
)

logger = logging.getLogger(__name__)
settings = get_settings()


class ConflictDetector:

    def __init__(
            self,
            tenants: TenantRepository,
            overrides: ScheduleOverrideRepository,
            appointments: AppointmentRepository
    ):
        self.tenants = tenants
        self.overrides = overrides
        self.appointments = appointments

    def tenant_zone(self, tenant_id: UUID) -> ZoneInfo:
        """Zone the tenant's slot grid and naive wall-clock times are expressed in"""
        tenant = self.tenants.get_by_id(tenant_id)
        if not tenant:
            raise TenantNotFoundError(tenant_id)
        return resolve_zone(tenant.timezone, settings.DEFAULT_TIMEZONE)

    @staticmethod
    def has_conflict(start: datetime, end: datetime, appointments: Iterable[Appointment]) -> bool:
        """True if [start, end) overlaps any of the given appointments"""
        start, end = as_utc(start), as_utc(end)
        for appointment in appointments:
            if intervals_overlap(start, end, as_utc(appointment.start_time), as_utc(appointment.end_time)):
                return True
        return False

    def find_conflicts(
            self,
            tenant_id: UUID,
            professional_id: UUID,
            start_time: datetime,
            total_duration: int,
            exclude_appointment_id: Optional[UUID] = None
    ) -> List[Appointment]:
        """Overlapping non-cancelled appointments. Storage errors propagate."""
        start = as_utc(start_time)
        end = add_minutes(start, total_duration)
        return self.appointments.list_active_overlapping(
            tenant_id, professional_id, start, end, exclude_appointment_id
        )

    def is_blocked_by_override(
            self,
            tenant_id: UUID,
            professional_id: UUID,
            start_time: datetime,
            total_duration: int
    ) -> bool:
        """True if an unavailable override covers any local date the interval touches"""
        zone = self.tenant_zone(tenant_id)
        start = to_utc(start_time, zone)
        end = add_minutes(start, total_duration)

        for day in local_dates_touched(start, end, zone):
            blocking = self.overrides.list_covering(
                tenant_id, professional_id, day, OverrideType.UNAVAILABLE.value
            )
            if blocking:
                return True
        return False

    def ensure_available(
            self,
            tenant_id: UUID,
            professional_id: UUID,
            start_time: datetime,
            total_duration: int,
            exclude_appointment_id: Optional[UUID] = None
    ) -> None:
        """Raise SlotConflictError if the interval is taken. Used on write paths."""
        start = to_utc(start_time, self.tenant_zone(tenant_id))
        end = add_minutes(start, total_duration)

        if self.is_blocked_by_override(tenant_id, professional_id, start, total_duration):
            raise SlotConflictError(professional_id, start, end)

        if self.find_conflicts(tenant_id, professional_id, start, total_duration, exclude_appointment_id):
            raise SlotConflictError(professional_id, start, end)

    def is_slot_available(
            self,
            tenant_id: UUID,
            professional_id: UUID,
            start_time: datetime,
            total_duration: int,
            exclude_appointment_id: Optional[UUID] = None
    ) -> bool:
        """Point check. Fails closed: any error means "not available"."""
        try:
            self.ensure_available(
                tenant_id, professional_id, start_time, total_duration, exclude_appointment_id
            )
            return True
        except SlotConflictError:
            return False
        except Exception as e:
            logger.error(
                f"Slot check failed for professional {professional_id} at {start_time}: {e}",
                exc_info=True
            )
            return False
