# app/models/schedule_override.py
from sqlalchemy import Column, String, Text, Date, DateTime, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from app.models.base import Base
import enum
import uuid


class OverrideType(str, enum.Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


class ScheduleOverride(Base):
    """Professional-specific exception to business hours (vacation, sick day, special hours)"""
    __tablename__ = "professional_schedule_overrides"
    __table_args__ = (
        Index("ix_schedule_overrides_lookup", "tenant_id", "professional_id", "start_date", "end_date"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(UUID(as_uuid=True), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False)
    professional_id = Column(UUID(as_uuid=True), ForeignKey("professionals.id", ondelete="CASCADE"), nullable=False)

    # Inclusive date range
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    override_type = Column(String(20), nullable=False)  # available, unavailable
    start_time = Column(String(5), nullable=True)  # HH:MM, only for available
    end_time = Column(String(5), nullable=True)  # HH:MM, only for available

    reason = Column(String(50), nullable=True)  # vacation, sick_leave, personal, ...
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return (
            f"<ScheduleOverride(professional_id={self.professional_id}, "
            f"{self.start_date}..{self.end_date}, {self.override_type})>"
        )

    @property
    def is_unavailable(self) -> bool:
        return self.override_type == OverrideType.UNAVAILABLE.value

    @property
    def has_hours(self) -> bool:
        return bool(self.start_time and self.end_time)

    def covers(self, day) -> bool:
        return self.start_date <= day <= self.end_date
