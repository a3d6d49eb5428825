"""Append-only storage for appointment audit events"""
from typing import List
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.appointment import AppointmentEvent


class AppointmentEventRepository:

    def __init__(self, db: Session):
        self.db = db

    def insert(self, event: AppointmentEvent) -> AppointmentEvent:
        try:
            self.db.add(event)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return event

    def list_for_appointment(self, tenant_id: UUID, appointment_id: UUID) -> List[AppointmentEvent]:
        return self.db.query(AppointmentEvent).filter(
            AppointmentEvent.tenant_id == tenant_id,
            AppointmentEvent.appointment_id == appointment_id
        ).order_by(AppointmentEvent.created_at.asc()).all()
