# app/services/appointment/appointment_lifecycle.py
"""
Status state machine and field updates for existing appointments.
Every mutation diffs old against new state and appends an audit event.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from app.core.exceptions import (
    AppointmentFetchError,
    AppointmentNotFoundError,
    InvalidTransitionError,
    ValidationFailure,
)
from app.models.appointment import Appointment, AppointmentStatus, EventType
from app.repositories.appointment_repository import AppointmentRepository
from app.schemas.appointment import Actor
from app.services.appointment.appointment_event_log import AppointmentEventLog
from app.services.availability.conflict_detector import ConflictDetector
from app.utils.time_ranges import add_minutes, as_utc, to_utc

logger = logging.getLogger(__name__)

S = AppointmentStatus

# Re-asserting the current status is always allowed (and still audited)
ALLOWED_TRANSITIONS = {
    S.SCHEDULED: {S.CONFIRMED, S.CANCELLED, S.NO_SHOW},
    S.CONFIRMED: {S.COMPLETED, S.CANCELLED, S.NO_SHOW},
    S.COMPLETED: set(),
    S.CANCELLED: set(),
    S.NO_SHOW: set(),
}

UPDATABLE_FIELDS = ("client_id", "professional_id", "start_time", "notes")
ID_FIELDS = ("client_id", "professional_id")


def can_transition(current: AppointmentStatus, requested: AppointmentStatus) -> bool:
    return current == requested or requested in ALLOWED_TRANSITIONS[current]


def _comparable(value: Any) -> Any:
    if isinstance(value, datetime):
        return as_utc(value)
    return value


class AppointmentLifecycle:

    def __init__(
            self,
            appointments: AppointmentRepository,
            event_log: AppointmentEventLog,
            conflicts: ConflictDetector
    ):
        self.appointments = appointments
        self.event_log = event_log
        self.conflicts = conflicts

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_by_id(self, tenant_id: UUID, appointment_id: UUID) -> Optional[Appointment]:
        return self.appointments.get_by_id(tenant_id, appointment_id)

    def get_by_date_range(
            self,
            tenant_id: UUID,
            start: datetime,
            end: datetime,
            professional_id: Optional[UUID] = None
    ) -> List[Appointment]:
        return self.appointments.list_by_date_range(
            tenant_id, as_utc(start), as_utc(end), professional_id
        )

    def get_by_client(self, tenant_id: UUID, client_id: UUID) -> List[Appointment]:
        return self.appointments.list_by_client(tenant_id, client_id)

    def get_by_professional(
            self,
            tenant_id: UUID,
            professional_id: UUID,
            start: datetime,
            end: datetime
    ) -> List[Appointment]:
        """Non-cancelled appointments of one professional overlapping [start, end)"""
        return self.appointments.list_active_overlapping(
            tenant_id, professional_id, as_utc(start), as_utc(end)
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def update_status(
            self,
            tenant_id: UUID,
            appointment_id: UUID,
            status: AppointmentStatus,
            actor: Actor
    ) -> Appointment:
        current = self._require(tenant_id, appointment_id)
        old_status = AppointmentStatus(current.status)
        new_status = AppointmentStatus(status)

        if not can_transition(old_status, new_status):
            raise InvalidTransitionError(old_status.value, new_status.value)

        self.appointments.update_fields(tenant_id, appointment_id, {"status": new_status.value})
        logger.info(f"Appointment {appointment_id} status {old_status.value} -> {new_status.value}")

        self.event_log.record(
            tenant_id, appointment_id, EventType.STATUS_CHANGED, actor,
            {"from": old_status.value, "to": new_status.value}
        )

        return self._reload(tenant_id, appointment_id)

    def cancel(self, tenant_id: UUID, appointment_id: UUID, actor: Actor) -> None:
        """Soft cancel; line items are kept"""
        current = self._require(tenant_id, appointment_id)
        old_status = AppointmentStatus(current.status)

        if not can_transition(old_status, AppointmentStatus.CANCELLED):
            raise InvalidTransitionError(old_status.value, AppointmentStatus.CANCELLED.value)

        self.appointments.update_fields(
            tenant_id, appointment_id, {"status": AppointmentStatus.CANCELLED.value}
        )
        logger.info(f"Appointment {appointment_id} cancelled")

        self.event_log.record(
            tenant_id, appointment_id, EventType.CANCELLED, actor, {"from": old_status.value}
        )

    def update(
            self,
            tenant_id: UUID,
            appointment_id: UUID,
            fields: Dict[str, Any],
            actor: Actor
    ) -> Appointment:
        """
        Partial update of client, professional, start time or notes.

        A new start time moves end_time with it. Moving the appointment in time
        or to another professional re-checks availability, ignoring the
        appointment itself. An "updated" event is written only when at least
        one value actually changed.
        """
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationFailure(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        current = self._require(tenant_id, appointment_id)

        values = dict(fields)
        if "start_time" in values:
            values["start_time"] = to_utc(values["start_time"], self.conflicts.tenant_zone(tenant_id))
        for key in ID_FIELDS:
            if values.get(key) is not None and not isinstance(values[key], UUID):
                try:
                    values[key] = UUID(str(values[key]))
                except ValueError:
                    raise ValidationFailure(f"Invalid {key}: {values[key]}")

        changes = {}
        for key, new_value in values.items():
            old_value = getattr(current, key)
            if _comparable(old_value) != _comparable(new_value):
                changes[key] = {"old": old_value, "new": new_value}

        if "start_time" in changes or "professional_id" in changes:
            start = values.get("start_time", current.start_time)
            professional_id = values.get("professional_id", current.professional_id)
            self.conflicts.ensure_available(
                tenant_id, professional_id, start, current.total_duration,
                exclude_appointment_id=appointment_id
            )

        if "start_time" in values:
            values["end_time"] = add_minutes(values["start_time"], current.total_duration)

        if values:
            self.appointments.update_fields(tenant_id, appointment_id, values)

        if changes:
            self.event_log.record(
                tenant_id, appointment_id, EventType.UPDATED, actor, {"changes": changes}
            )

        return self._reload(tenant_id, appointment_id)

    def delete(self, tenant_id: UUID, appointment_id: UUID) -> None:
        """Administrative hard delete. Not audited."""
        self._require(tenant_id, appointment_id)
        self.appointments.delete_with_line_items(tenant_id, appointment_id)
        logger.warning(f"Appointment {appointment_id} permanently deleted")

    # ------------------------------------------------------------------

    def _require(self, tenant_id: UUID, appointment_id: UUID) -> Appointment:
        current = self.appointments.get_by_id(tenant_id, appointment_id)
        if not current:
            raise AppointmentNotFoundError(appointment_id)
        return current

    def _reload(self, tenant_id: UUID, appointment_id: UUID) -> Appointment:
        result = self.appointments.get_by_id(tenant_id, appointment_id)
        if not result:
            raise AppointmentFetchError(appointment_id, "Failed to fetch updated appointment")
        return result
