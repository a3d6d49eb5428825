"""
Pydantic schemas for appointments, bookings and audit events
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.models.appointment import ActorType, AppointmentStatus


# ============================================================================
# Request Schemas
# ============================================================================

class Actor(BaseModel):
    """Who performs a mutation, for audit attribution"""
    type: ActorType = ActorType.STAFF
    id: Optional[UUID] = None


class ClientIdentity(BaseModel):
    """Existing client id, or name + phone (+ email) for find-or-create"""
    client_id: Optional[UUID] = None
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, min_length=8, max_length=30)
    email: Optional[EmailStr] = None


class BookingRequest(BaseModel):
    professional_id: UUID
    service_ids: List[UUID] = Field(..., min_length=1)
    start_time: datetime
    client: Optional[ClientIdentity] = None  # None = walk-in
    notes: Optional[str] = Field(None, max_length=2000)


class PublicBookingRequest(BaseModel):
    professional_id: UUID
    service_ids: List[UUID] = Field(..., min_length=1)
    start_time: datetime
    client_name: str = Field(..., min_length=1, max_length=200)
    client_phone: str = Field(..., min_length=8, max_length=30)
    client_email: Optional[EmailStr] = None
    notes: Optional[str] = Field(None, max_length=2000)


class AppointmentUpdateRequest(BaseModel):
    """Partial update; only fields that were sent are applied"""
    client_id: Optional[UUID] = None
    professional_id: Optional[UUID] = None
    start_time: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("professional_id", "start_time")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class StatusUpdateRequest(BaseModel):
    status: AppointmentStatus


# ============================================================================
# Response Schemas
# ============================================================================

class ClientSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    phone: str
    email: Optional[str] = None


class ProfessionalSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    avatar_url: Optional[str] = None


class LineItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    service_id: Optional[UUID]
    service_name_at_booking: str
    price_at_booking: Decimal
    duration_at_booking: int
    order_index: int


class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tenant_id: UUID
    client_id: Optional[UUID]
    professional_id: UUID
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus
    notes: Optional[str]
    total_duration: int
    total_price: Decimal
    client: Optional[ClientSummary] = None
    professional: Optional[ProfessionalSummary] = None
    services: List[LineItemResponse] = Field(default_factory=list)


class AppointmentEventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    appointment_id: UUID
    event_type: str
    actor_type: str
    actor_id: Optional[UUID]
    payload: Optional[Dict[str, Any]]
    created_at: datetime


class BookingSummaryService(BaseModel):
    name: str
    duration: int
    price: Decimal


class BookingSummary(BaseModel):
    services: List[BookingSummaryService]
    total_duration: int
    total_price: Decimal
    professional_name: str
    date_time: datetime


class BookingResult(BaseModel):
    appointment: AppointmentResponse
    client: ClientSummary
    summary: BookingSummary
