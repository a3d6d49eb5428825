# ===== app/tasks/appointment_event_tasks.py =====
import logging

from app.config.celery_config import celery_app
from app.config.database import SessionLocal
from app.models.appointment import AppointmentEvent
from app.repositories.appointment_event_repository import AppointmentEventRepository
from app.schemas.task_payloads import AppointmentEventPayload
from app.config.settings import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


@celery_app.task(bind=True, max_retries=settings.AUDIT_RETRY_MAX_ATTEMPTS)
def record_appointment_event(self, payload: dict):
    """
    Retry an audit event whose inline write failed

    Args:
        payload: AppointmentEventPayload as JSON-compatible dict
    """
    event_payload = AppointmentEventPayload.model_validate(payload)
    db = SessionLocal()
    try:
        logger.info(
            f"Retrying {event_payload.event_type} event for appointment {event_payload.appointment_id}"
        )

        AppointmentEventRepository(db).insert(AppointmentEvent(**event_payload.model_dump()))

        return {"status": "success", "appointment_id": str(event_payload.appointment_id)}

    except Exception as exc:
        logger.error(f"Failed to record audit event for {event_payload.appointment_id}: {exc}")

        # Retry with exponential backoff: 1min, 2min, 4min
        raise self.retry(
            exc=exc,
            countdown=60 * (2 ** self.request.retries)
        )
    finally:
        db.close()
