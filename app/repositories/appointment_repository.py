"""Appointment repository - storage for appointments and their line items"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import SlotConflictError
from app.models.appointment import Appointment, AppointmentLineItem, AppointmentStatus

logger = logging.getLogger(__name__)

# Name of the PostgreSQL exclusion constraint created by the initial migration
NO_OVERLAP_CONSTRAINT = "appointments_no_overlap"


class AppointmentRepository:

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_by_id(self, tenant_id: UUID, appointment_id: UUID) -> Optional[Appointment]:
        """Hydrated appointment (client, professional, line items) or None"""
        return self.db.query(Appointment).filter(
            Appointment.tenant_id == tenant_id,
            Appointment.id == appointment_id
        ).populate_existing().first()

    def list_active_overlapping(
            self,
            tenant_id: UUID,
            professional_id: UUID,
            window_start: datetime,
            window_end: datetime,
            exclude_appointment_id: Optional[UUID] = None
    ) -> List[Appointment]:
        """Non-cancelled appointments whose interval overlaps [window_start, window_end)"""
        query = self.db.query(Appointment).filter(
            Appointment.tenant_id == tenant_id,
            Appointment.professional_id == professional_id,
            Appointment.status != AppointmentStatus.CANCELLED.value,
            Appointment.start_time < window_end,
            Appointment.end_time > window_start
        )

        if exclude_appointment_id:
            query = query.filter(Appointment.id != exclude_appointment_id)

        return query.order_by(Appointment.start_time.asc()).all()

    def list_by_date_range(
            self,
            tenant_id: UUID,
            start: datetime,
            end: datetime,
            professional_id: Optional[UUID] = None
    ) -> List[Appointment]:
        query = self.db.query(Appointment).filter(
            Appointment.tenant_id == tenant_id,
            Appointment.start_time >= start,
            Appointment.start_time <= end
        )

        if professional_id:
            query = query.filter(Appointment.professional_id == professional_id)

        return query.order_by(Appointment.start_time.asc()).all()

    def list_by_client(self, tenant_id: UUID, client_id: UUID) -> List[Appointment]:
        return self.db.query(Appointment).filter(
            Appointment.tenant_id == tenant_id,
            Appointment.client_id == client_id
        ).order_by(Appointment.start_time.desc()).all()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, appointment: Appointment) -> Appointment:
        try:
            self.db.add(appointment)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if NO_OVERLAP_CONSTRAINT in str(e.orig):
                raise SlotConflictError(
                    appointment.professional_id, appointment.start_time, appointment.end_time
                ) from e
            raise
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(appointment)
        return appointment

    def insert_line_items(self, line_items: Sequence[AppointmentLineItem]) -> None:
        try:
            self.db.add_all(line_items)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def update_fields(self, tenant_id: UUID, appointment_id: UUID, fields: Dict[str, Any]) -> int:
        """Apply a partial update; returns the number of rows touched"""
        try:
            count = self.db.query(Appointment).filter(
                Appointment.tenant_id == tenant_id,
                Appointment.id == appointment_id
            ).update(fields, synchronize_session=False)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if NO_OVERLAP_CONSTRAINT in str(e.orig):
                raise SlotConflictError(
                    fields.get("professional_id"), fields.get("start_time"), fields.get("end_time")
                ) from e
            raise
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return count

    def delete_with_line_items(self, tenant_id: UUID, appointment_id: UUID) -> None:
        """Remove an appointment and its line items in a single commit"""
        try:
            self.db.query(AppointmentLineItem).filter(
                AppointmentLineItem.tenant_id == tenant_id,
                AppointmentLineItem.appointment_id == appointment_id
            ).delete(synchronize_session=False)
            self.db.query(Appointment).filter(
                Appointment.tenant_id == tenant_id,
                Appointment.id == appointment_id
            ).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.expire_all()

    def delete(self, tenant_id: UUID, appointment_id: UUID) -> None:
        try:
            self.db.query(Appointment).filter(
                Appointment.tenant_id == tenant_id,
                Appointment.id == appointment_id
            ).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.expire_all()
