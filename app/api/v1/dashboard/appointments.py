# ============================================================================
# app/api/v1/dashboard/appointments.py
# Staff endpoints - thin HTTP layer over the booking core
# ============================================================================
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status

from app.api.dependencies import (
    get_actor,
    get_appointment_lifecycle,
    get_availability_service,
    get_booking_service,
    get_dashboard_tenant,
    get_event_repository,
)
from app.models.tenant import Tenant
from app.repositories.appointment_event_repository import AppointmentEventRepository
from app.schemas.appointment import (
    Actor,
    AppointmentEventResponse,
    AppointmentResponse,
    AppointmentUpdateRequest,
    BookingRequest,
    StatusUpdateRequest,
)
from app.services.appointment.appointment_lifecycle import AppointmentLifecycle
from app.services.availability.availability_service import AvailabilityService
from app.services.booking.booking_service import BookingService

router = APIRouter(prefix="/{tenant_id}/appointments", tags=["dashboard-appointments"])


@router.get("", response_model=List[AppointmentResponse])
async def list_appointments(
        start: Optional[datetime] = Query(None, description="Appointments starting at or after"),
        end: Optional[datetime] = Query(None, description="Appointments starting at or before"),
        professional_id: Optional[UUID] = Query(None),
        client_id: Optional[UUID] = Query(None, description="Client history, newest first"),
        tenant: Tenant = Depends(get_dashboard_tenant),
        lifecycle: AppointmentLifecycle = Depends(get_appointment_lifecycle)
):
    if client_id:
        return lifecycle.get_by_client(tenant.id, client_id)

    if not start or not end:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Both start and end are required unless client_id is given"
        )

    return lifecycle.get_by_date_range(tenant.id, start, end, professional_id)


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def create_appointment(
        request: BookingRequest,
        tenant: Tenant = Depends(get_dashboard_tenant),
        actor: Actor = Depends(get_actor),
        booking: BookingService = Depends(get_booking_service)
):
    """Book on behalf of a client, or as a walk-in when no client is given"""
    return booking.create_booking(
        tenant_id=tenant.id,
        professional_id=request.professional_id,
        service_ids=request.service_ids,
        start_time=request.start_time,
        client=request.client,
        actor=actor,
        notes=request.notes,
    )


@router.get("/availability/check")
async def check_slot(
        professional_id: UUID = Query(...),
        start_time: datetime = Query(...),
        duration: int = Query(..., ge=1, description="Total duration in minutes"),
        exclude_appointment_id: Optional[UUID] = Query(None),
        tenant: Tenant = Depends(get_dashboard_tenant),
        availability: AvailabilityService = Depends(get_availability_service)
):
    available = availability.is_slot_available(
        tenant.id, professional_id, start_time, duration, exclude_appointment_id
    )
    return {"available": available}


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
        appointment_id: UUID = Path(..., description="The appointment ID"),
        tenant: Tenant = Depends(get_dashboard_tenant),
        lifecycle: AppointmentLifecycle = Depends(get_appointment_lifecycle)
):
    appointment = lifecycle.get_by_id(tenant.id, appointment_id)
    if not appointment:
        raise HTTPException(status_code=404, detail="Appointment not found")
    return appointment


@router.patch("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
        request: AppointmentUpdateRequest,
        appointment_id: UUID = Path(...),
        tenant: Tenant = Depends(get_dashboard_tenant),
        actor: Actor = Depends(get_actor),
        lifecycle: AppointmentLifecycle = Depends(get_appointment_lifecycle)
):
    return lifecycle.update(
        tenant.id, appointment_id, request.model_dump(exclude_unset=True), actor
    )


@router.post("/{appointment_id}/status", response_model=AppointmentResponse)
async def update_status(
        request: StatusUpdateRequest,
        appointment_id: UUID = Path(...),
        tenant: Tenant = Depends(get_dashboard_tenant),
        actor: Actor = Depends(get_actor),
        lifecycle: AppointmentLifecycle = Depends(get_appointment_lifecycle)
):
    return lifecycle.update_status(tenant.id, appointment_id, request.status, actor)


@router.post("/{appointment_id}/cancel", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_appointment(
        appointment_id: UUID = Path(...),
        tenant: Tenant = Depends(get_dashboard_tenant),
        actor: Actor = Depends(get_actor),
        lifecycle: AppointmentLifecycle = Depends(get_appointment_lifecycle)
):
    lifecycle.cancel(tenant.id, appointment_id, actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_appointment(
        appointment_id: UUID = Path(...),
        tenant: Tenant = Depends(get_dashboard_tenant),
        lifecycle: AppointmentLifecycle = Depends(get_appointment_lifecycle)
):
    """Permanent delete (admin). Not recorded in the audit trail."""
    lifecycle.delete(tenant.id, appointment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{appointment_id}/events", response_model=List[AppointmentEventResponse])
async def list_events(
        appointment_id: UUID = Path(...),
        tenant: Tenant = Depends(get_dashboard_tenant),
        events: AppointmentEventRepository = Depends(get_event_repository)
):
    return events.list_for_appointment(tenant.id, appointment_id)
