"""Tests for the deferred audit write task"""
import uuid
from datetime import datetime, timezone

from app.models import AppointmentEvent
from app.schemas.task_payloads import AppointmentEventPayload
from app.services.appointment import appointment_event_log
from app.tasks import appointment_event_tasks


def make_payload(tenant_id):
    return AppointmentEventPayload(
        tenant_id=tenant_id,
        appointment_id=uuid.uuid4(),
        event_type="cancelled",
        actor_type="staff",
        payload={"from": "scheduled"},
        created_at=datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc),
    )


def test_task_writes_queued_event(db, session_factory, tenant, monkeypatch):
    monkeypatch.setattr(appointment_event_tasks, "SessionLocal", session_factory)
    payload = make_payload(tenant.id)

    result = appointment_event_tasks.record_appointment_event.apply(
        args=[payload.model_dump(mode="json")]
    ).get()

    assert result == {"status": "success", "appointment_id": str(payload.appointment_id)}
    stored = db.query(AppointmentEvent).filter(
        AppointmentEvent.appointment_id == payload.appointment_id
    ).one()
    assert stored.event_type == "cancelled"
    assert stored.payload == {"from": "scheduled"}


def test_enqueue_sends_json_payload(tenant, monkeypatch):
    sent = []
    monkeypatch.setattr(appointment_event_log.settings, "AUDIT_RETRY_ENABLED", True)
    monkeypatch.setattr(appointment_event_tasks.record_appointment_event, "delay", sent.append)
    payload = make_payload(tenant.id)

    appointment_event_log.enqueue_event_retry(payload)

    assert sent == [payload.model_dump(mode="json")]


def test_enqueue_disabled(tenant, monkeypatch):
    sent = []
    monkeypatch.setattr(appointment_event_log.settings, "AUDIT_RETRY_ENABLED", False)
    monkeypatch.setattr(appointment_event_tasks.record_appointment_event, "delay", sent.append)

    appointment_event_log.enqueue_event_retry(make_payload(tenant.id))

    assert sent == []
