# ============================================================================
# FILE: app/api/dependencies.py
# Request-scoped dependencies: service composition and actor context
# ============================================================================
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, HTTPException, Path, status
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.models.appointment import ActorType
from app.models.tenant import Tenant
from app.repositories.appointment_event_repository import AppointmentEventRepository
from app.repositories.appointment_repository import AppointmentRepository
from app.repositories.schedule_override_repository import ScheduleOverrideRepository
from app.repositories.tenant_repository import TenantRepository
from app.schemas.appointment import Actor
from app.services.appointment.appointment_event_log import AppointmentEventLog
from app.services.appointment.appointment_lifecycle import AppointmentLifecycle
from app.services.availability.availability_service import AvailabilityService
from app.services.availability.conflict_detector import ConflictDetector
from app.services.booking.booking_service import BookingService


# ============================================================================
# Services
# ============================================================================

def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService.for_session(db)


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    return BookingService.for_session(db)


def get_appointment_lifecycle(db: Session = Depends(get_db)) -> AppointmentLifecycle:
    tenants = TenantRepository(db)
    appointments = AppointmentRepository(db)
    return AppointmentLifecycle(
        appointments=appointments,
        event_log=AppointmentEventLog(AppointmentEventRepository(db)),
        conflicts=ConflictDetector(tenants, ScheduleOverrideRepository(db), appointments),
    )


def get_event_repository(db: Session = Depends(get_db)) -> AppointmentEventRepository:
    return AppointmentEventRepository(db)


# ============================================================================
# Tenant resolution
# ============================================================================

def get_public_tenant(
        slug: str = Path(..., description="Public booking slug of the salon"),
        db: Session = Depends(get_db)
) -> Tenant:
    tenant = TenantRepository(db).get_by_slug(slug)
    if not tenant:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tenant not found")
    return tenant


def get_dashboard_tenant(
        tenant_id: UUID = Path(..., description="Tenant ID"),
        db: Session = Depends(get_db)
) -> Tenant:
    tenant = TenantRepository(db).get_by_id(tenant_id)
    if not tenant:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tenant not found")
    return tenant


# ============================================================================
# Actor context
# ============================================================================

def get_actor(
        x_actor_type: str = Header(ActorType.STAFF.value),
        x_actor_id: Optional[str] = Header(None)
) -> Actor:
    """
    Audit attribution for dashboard calls.
    Authentication is handled upstream; this only reads what the gateway forwards.
    """
    try:
        actor_type = ActorType(x_actor_type)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid actor type: {x_actor_type}"
        )

    actor_id = None
    if x_actor_id:
        try:
            actor_id = UUID(x_actor_id)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="X-Actor-Id must be a UUID"
            )

    return Actor(type=actor_type, id=actor_id)
