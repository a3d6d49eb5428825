# app/services/appointment/appointment_event_log.py
"""
Append-only audit trail for appointment mutations.

Writes are best-effort: a failed insert is logged and handed to a retry queue,
and never fails or rolls back the mutation it documents.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional
from uuid import UUID

from pydantic_core import to_jsonable_python

from app.config.settings import get_settings
from app.models.appointment import AppointmentEvent, EventType
from app.repositories.appointment_event_repository import AppointmentEventRepository
from app.schemas.appointment import Actor
from app.schemas.task_payloads import AppointmentEventPayload

logger = logging.getLogger(__name__)
settings = get_settings()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def enqueue_event_retry(payload: AppointmentEventPayload) -> None:
    """Default dead-letter handler: hand the event to the Celery audit queue"""
    if not settings.AUDIT_RETRY_ENABLED:
        return

    from app.tasks.appointment_event_tasks import record_appointment_event

    record_appointment_event.delay(payload.model_dump(mode="json"))


class AppointmentEventLog:

    def __init__(
            self,
            events: AppointmentEventRepository,
            clock: Callable[[], datetime] = utc_now,
            dead_letter: Callable[[AppointmentEventPayload], None] = enqueue_event_retry
    ):
        self.events = events
        self.clock = clock
        self.dead_letter = dead_letter

    def record(
            self,
            tenant_id: UUID,
            appointment_id: UUID,
            event_type: EventType,
            actor: Actor,
            payload: Optional[Dict[str, Any]] = None
    ) -> Optional[AppointmentEvent]:
        """Append one event; returns it, or None when the write failed"""
        event_payload = AppointmentEventPayload(
            tenant_id=tenant_id,
            appointment_id=appointment_id,
            event_type=event_type.value,
            actor_type=actor.type.value,
            actor_id=actor.id,
            payload=to_jsonable_python(payload) if payload is not None else None,
            created_at=self.clock(),
        )

        try:
            return self.events.insert(AppointmentEvent(**event_payload.model_dump()))
        except Exception as e:
            logger.error(
                f"Failed to record {event_type.value} event for appointment {appointment_id}: {e}",
                exc_info=True
            )

        try:
            self.dead_letter(event_payload)
        except Exception as e:
            logger.error(f"Failed to queue audit event retry for appointment {appointment_id}: {e}")

        return None
