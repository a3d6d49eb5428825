"""
Public booking API - salon catalog, availability and self-service booking
"""
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.api.dependencies import get_availability_service, get_booking_service, get_public_tenant
from app.models.tenant import Tenant
from app.schemas.appointment import BookingResult, PublicBookingRequest
from app.schemas.availability import AvailabilityResponse, NextAvailableDateResponse
from app.schemas.catalog import ProfessionalResponse, ServiceResponse, TenantPublicResponse
from app.services.availability.availability_service import AvailabilityService
from app.services.booking.booking_service import BookingService

router = APIRouter()


@router.get("/{slug}", response_model=TenantPublicResponse)
async def get_tenant(tenant: Tenant = Depends(get_public_tenant)):
    """Public profile of an active salon"""
    return tenant


@router.get("/{slug}/services", response_model=List[ServiceResponse])
async def list_services(
        tenant: Tenant = Depends(get_public_tenant),
        booking: BookingService = Depends(get_booking_service)
):
    return booking.get_active_services(tenant.id)


@router.get("/{slug}/professionals", response_model=List[ProfessionalResponse])
async def list_professionals(
        service_ids: Optional[List[UUID]] = Query(None, description="Only professionals offering all of these"),
        tenant: Tenant = Depends(get_public_tenant),
        booking: BookingService = Depends(get_booking_service)
):
    if service_ids:
        return booking.get_professionals_for_services(tenant.id, service_ids)
    return booking.get_active_professionals(tenant.id)


@router.get("/{slug}/availability", response_model=AvailabilityResponse)
async def get_availability(
        professional_id: UUID = Query(...),
        day: date = Query(..., alias="date", description="Calendar date, YYYY-MM-DD"),
        service_ids: List[UUID] = Query(..., description="Selected services"),
        slot_step: Optional[int] = Query(None, ge=5, le=240),
        tenant: Tenant = Depends(get_public_tenant),
        booking: BookingService = Depends(get_booking_service),
        availability: AvailabilityService = Depends(get_availability_service)
):
    """
    Slot grid for one professional and date.
    Empty when the professional is off or availability cannot be determined.
    """
    total_duration = booking.get_total_duration(tenant.id, service_ids)
    slots = availability.get_available_slots(
        tenant.id, professional_id, day, total_duration, slot_step
    )
    return AvailabilityResponse(
        professional_id=professional_id,
        date=day,
        total_duration=total_duration,
        slots=slots,
    )


@router.get("/{slug}/availability/next", response_model=NextAvailableDateResponse)
async def get_next_available_date(
        professional_id: UUID = Query(...),
        service_ids: List[UUID] = Query(...),
        start_from: Optional[date] = Query(None),
        tenant: Tenant = Depends(get_public_tenant),
        booking: BookingService = Depends(get_booking_service),
        availability: AvailabilityService = Depends(get_availability_service)
):
    total_duration = booking.get_total_duration(tenant.id, service_ids)
    next_date = availability.get_next_available_date(
        tenant.id, professional_id, total_duration, start_from
    )
    return NextAvailableDateResponse(
        professional_id=professional_id,
        total_duration=total_duration,
        next_available_date=next_date,
    )


@router.post("/{slug}/bookings", response_model=BookingResult, status_code=status.HTTP_201_CREATED)
async def create_booking(
        request: PublicBookingRequest,
        tenant: Tenant = Depends(get_public_tenant),
        booking: BookingService = Depends(get_booking_service)
):
    """Book as a customer. The client is matched by phone number or created."""
    return booking.create_public_booking(tenant.id, request)
