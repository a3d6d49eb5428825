from __future__ import annotations
# app/schemas/task_payloads.py
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime, timezone
from uuid import UUID


class AppointmentEventPayload(BaseModel):
    """Audit event that could not be written inline and is queued for retry"""
    tenant_id: UUID = Field(..., description="Tenant identifier")
    appointment_id: UUID = Field(..., description="Appointment the event documents")
    event_type: str = Field(..., description="created, updated, status_changed or cancelled")
    actor_type: str = Field(..., description="staff, client or system")
    actor_id: Optional[UUID] = Field(None, description="Acting user, if known")
    payload: Optional[Dict[str, Any]] = Field(None, description="Event details")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
