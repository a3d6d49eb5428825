# app/models/tenant.py
"""
Tenant Model - one salon/business in the multi-tenant system
"""
from sqlalchemy import Column, String, Boolean, DateTime, JSON
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
import uuid
from app.models.base import Base


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    slug = Column(String(100), nullable=False, unique=True, index=True)

    phone = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(String(500), nullable=True)

    # IANA zone name; business hours and override dates are wall-clock in this zone
    timezone = Column(String(50), default="UTC", nullable=False)

    # {"monday": [{"start": "09:00", "end": "18:00"}], ...}
    business_hours = Column(JSON, default=dict)

    # {"slot_duration": 30, "show_prices_publicly": true, ...}
    settings = Column(JSON, default=dict)

    active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self):
        return f"<Tenant(id={self.id}, slug={self.slug})>"

    @property
    def slot_duration(self):
        """Per-tenant slot step in minutes, if configured"""
        tenant_settings = self.settings or {}
        return tenant_settings.get("slot_duration") or tenant_settings.get("booking_slot_duration")
