# app/models/appointment.py
from sqlalchemy import Column, String, Integer, Numeric, Text, DateTime, ForeignKey, Index, JSON, Boolean
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.models.base import Base
import enum
import uuid


class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class EventType(str, enum.Enum):
    CREATED = "created"
    UPDATED = "updated"
    STATUS_CHANGED = "status_changed"
    CANCELLED = "cancelled"


class ActorType(str, enum.Enum):
    STAFF = "staff"
    CLIENT = "client"
    SYSTEM = "system"


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_professional_window", "tenant_id", "professional_id", "start_time", "end_time"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # References
    tenant_id = Column(UUID(as_uuid=True), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False)
    client_id = Column(UUID(as_uuid=True), ForeignKey("clients.id"), nullable=True)  # null = walk-in
    professional_id = Column(UUID(as_uuid=True), ForeignKey("professionals.id"), nullable=False)

    # end_time = start_time + total_duration, computed at creation
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)

    status = Column(String(20), default=AppointmentStatus.SCHEDULED.value, nullable=False)
    notes = Column(Text, nullable=True)

    total_duration = Column(Integer, nullable=False)  # minutes, sum of line items
    total_price = Column(Numeric(10, 2), nullable=False)  # sum of line items

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    client = relationship("Client", lazy="joined")
    professional = relationship("Professional", lazy="joined")
    services = relationship(
        "AppointmentLineItem",
        order_by="AppointmentLineItem.order_index",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<Appointment(id={self.id}, professional_id={self.professional_id}, status={self.status})>"


class AppointmentLineItem(Base):
    """Service snapshot attached to an appointment; immutable after booking"""
    __tablename__ = "appointment_services"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(UUID(as_uuid=True), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False)
    appointment_id = Column(
        UUID(as_uuid=True),
        ForeignKey("appointments.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    service_id = Column(UUID(as_uuid=True), ForeignKey("services.id", ondelete="SET NULL"), nullable=True)

    service_name_at_booking = Column(String(200), nullable=False)
    price_at_booking = Column(Numeric(10, 2), nullable=False)
    duration_at_booking = Column(Integer, nullable=False)
    order_index = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class AppointmentEvent(Base):
    """Append-only audit trail entry"""
    __tablename__ = "appointment_events"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(UUID(as_uuid=True), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False)
    # No FK: the trail outlives an administrative hard delete
    appointment_id = Column(UUID(as_uuid=True), nullable=False, index=True)

    event_type = Column(String(20), nullable=False)
    actor_type = Column(String(20), nullable=False)
    actor_id = Column(UUID(as_uuid=True), nullable=True)
    payload = Column(JSON, nullable=True)

    notified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
