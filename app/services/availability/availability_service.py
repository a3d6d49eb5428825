# app/services/availability/availability_service.py
"""
Availability read path: slot grids, point checks and next-open-date lookups.

Every entry point fails closed: a storage error yields "no slots" or "not
available", never an exception.
"""
import logging
from datetime import date, datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.repositories.appointment_repository import AppointmentRepository
from app.repositories.schedule_override_repository import ScheduleOverrideRepository
from app.repositories.tenant_repository import TenantRepository
from app.schemas.availability import TimeSlot
from app.services.availability.conflict_detector import ConflictDetector
from app.services.availability.schedule_resolver import ScheduleResolver
from app.services.availability.slot_generator import SlotGenerator
from app.utils.time_ranges import date_range, local_day_window, resolve_zone

logger = logging.getLogger(__name__)
settings = get_settings()


class AvailabilityService:
    """Composes the schedule resolver, slot generator and conflict detector"""

    def __init__(
            self,
            tenants: TenantRepository,
            overrides: ScheduleOverrideRepository,
            appointments: AppointmentRepository
    ):
        self.tenants = tenants
        self.overrides = overrides
        self.appointments = appointments
        self.conflicts = ConflictDetector(tenants, overrides, appointments)

    @classmethod
    def for_session(cls, db: Session) -> "AvailabilityService":
        return cls(
            TenantRepository(db),
            ScheduleOverrideRepository(db),
            AppointmentRepository(db),
        )

    def get_available_slots(
            self,
            tenant_id: UUID,
            professional_id: UUID,
            day: date,
            total_duration: int,
            slot_step: Optional[int] = None
    ) -> List[TimeSlot]:
        """
        Slot grid for a professional on one date.

        Args:
            tenant_id: Tenant whose business hours apply
            professional_id: Professional to check
            day: Calendar date in the tenant's timezone
            total_duration: Sum of the selected services' durations (minutes)
            slot_step: Minutes between candidate starts; tenant setting or
                BOOKING_SLOT_DURATION when omitted

        Returns:
            Ordered slots tagged available/unavailable, or [] when closed or on error
        """
        if total_duration <= 0:
            raise ValueError("total_duration must be positive")

        try:
            tenant = self.tenants.get_by_id(tenant_id)
            if not tenant:
                logger.error(f"Tenant {tenant_id} not found while computing availability")
                return []

            zone = resolve_zone(tenant.timezone, settings.DEFAULT_TIMEZONE)
            step = slot_step or tenant.slot_duration or settings.BOOKING_SLOT_DURATION

            overrides = self.overrides.list_covering(tenant_id, professional_id, day)
            ranges = ScheduleResolver.resolve(tenant.business_hours, overrides, day)
            if not ranges:
                return []

            window_start, window_end = local_day_window(day, zone)
            booked = self.appointments.list_active_overlapping(
                tenant_id, professional_id, window_start, window_end
            )

            return SlotGenerator.generate(ranges, step, total_duration, booked, day, zone)

        except Exception as e:
            logger.error(
                f"Failed to compute slots for tenant {tenant_id}, "
                f"professional {professional_id} on {day}: {e}",
                exc_info=True
            )
            return []

    def is_slot_available(
            self,
            tenant_id: UUID,
            professional_id: UUID,
            start_time: datetime,
            total_duration: int,
            exclude_appointment_id: Optional[UUID] = None
    ) -> bool:
        return self.conflicts.is_slot_available(
            tenant_id, professional_id, start_time, total_duration, exclude_appointment_id
        )

    def get_next_available_date(
            self,
            tenant_id: UUID,
            professional_id: UUID,
            total_duration: int,
            start_from: Optional[date] = None
    ) -> Optional[date]:
        """First date within MAX_AVAILABILITY_SCAN_DAYS with at least one free slot"""
        if start_from is None:
            start_from = self._today_for(tenant_id)

        for day in date_range(start_from, settings.MAX_AVAILABILITY_SCAN_DAYS):
            slots = self.get_available_slots(tenant_id, professional_id, day, total_duration)
            if any(slot.available for slot in slots):
                return day

        return None

    def _today_for(self, tenant_id: UUID) -> date:
        try:
            tenant = self.tenants.get_by_id(tenant_id)
        except Exception as e:
            logger.error(f"Failed to load tenant {tenant_id}: {e}")
            tenant = None
        zone = resolve_zone(tenant.timezone if tenant else None, settings.DEFAULT_TIMEZONE)
        return datetime.now(timezone.utc).astimezone(zone).date()
