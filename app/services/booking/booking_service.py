# app/services/booking/booking_service.py
"""
Booking transaction coordinator.

Creates an appointment and its service line items as one logical unit:
resolve client -> snapshot services -> check the slot -> insert appointment ->
insert line items (compensating delete on failure) -> audit -> re-read.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.exceptions import (
    AppointmentFetchError,
    CompensationError,
    NoValidServicesError,
    ProfessionalNotFoundError,
    ValidationFailure,
)
from app.models.appointment import (
    ActorType,
    Appointment,
    AppointmentLineItem,
    AppointmentStatus,
    EventType,
)
from app.models.client import Client
from app.models.professional import Professional
from app.models.service import Service
from app.models.tenant import Tenant
from app.repositories.appointment_event_repository import AppointmentEventRepository
from app.repositories.appointment_repository import AppointmentRepository
from app.repositories.catalog_repository import ProfessionalRepository, ServiceRepository
from app.repositories.client_repository import ClientRepository
from app.repositories.schedule_override_repository import ScheduleOverrideRepository
from app.repositories.tenant_repository import TenantRepository
from app.schemas.appointment import (
    Actor,
    BookingResult,
    BookingSummary,
    BookingSummaryService,
    ClientIdentity,
    ClientSummary,
    AppointmentResponse,
    PublicBookingRequest,
)
from app.services.appointment.appointment_event_log import AppointmentEventLog
from app.services.availability.conflict_detector import ConflictDetector
from app.services.client.client_service import ClientService
from app.utils.time_ranges import add_minutes, as_utc, to_utc

logger = logging.getLogger(__name__)


class BookingService:

    def __init__(
            self,
            tenants: TenantRepository,
            services: ServiceRepository,
            professionals: ProfessionalRepository,
            clients: ClientRepository,
            appointments: AppointmentRepository,
            conflicts: ConflictDetector,
            event_log: AppointmentEventLog
    ):
        self.tenants = tenants
        self.services = services
        self.professionals = professionals
        self.clients = clients
        self.client_service = ClientService(clients)
        self.appointments = appointments
        self.conflicts = conflicts
        self.event_log = event_log

    @classmethod
    def for_session(cls, db: Session) -> "BookingService":
        tenants = TenantRepository(db)
        appointments = AppointmentRepository(db)
        return cls(
            tenants=tenants,
            services=ServiceRepository(db),
            professionals=ProfessionalRepository(db),
            clients=ClientRepository(db),
            appointments=appointments,
            conflicts=ConflictDetector(tenants, ScheduleOverrideRepository(db), appointments),
            event_log=AppointmentEventLog(AppointmentEventRepository(db)),
        )

    # ------------------------------------------------------------------
    # Public catalog
    # ------------------------------------------------------------------

    def get_tenant_by_slug(self, slug: str) -> Optional[Tenant]:
        return self.tenants.get_by_slug(slug)

    def get_active_services(self, tenant_id: UUID) -> List[Service]:
        return self.services.get_active(tenant_id)

    def get_active_professionals(self, tenant_id: UUID) -> List[Professional]:
        return self.professionals.get_active(tenant_id)

    def get_professionals_for_services(
            self,
            tenant_id: UUID,
            service_ids: Sequence[UUID]
    ) -> List[Professional]:
        return self.professionals.get_for_services(tenant_id, service_ids)

    def get_total_duration(self, tenant_id: UUID, service_ids: Sequence[UUID]) -> int:
        services = self.services.get_by_ids(tenant_id, service_ids)
        if not services:
            raise NoValidServicesError()
        return sum(service.duration for service in services)

    # ------------------------------------------------------------------
    # Booking
    # ------------------------------------------------------------------

    def create_booking(
            self,
            tenant_id: UUID,
            professional_id: UUID,
            service_ids: Sequence[UUID],
            start_time: datetime,
            client: Optional[ClientIdentity],
            actor: Actor,
            notes: Optional[str] = None
    ) -> Appointment:
        """
        Create an appointment with one line item per resolved service.

        Raises:
            NoValidServicesError: none of the service ids resolved
            ProfessionalNotFoundError: unknown professional
            SlotConflictError: the interval is already taken
            CompensationError: line items failed and the rollback delete failed too
            AppointmentFetchError: committed, but the hydrated re-read failed
            SQLAlchemyError: any other storage failure
        """
        # 1. Client
        resolved_client = self._resolve_client(tenant_id, client)
        client_id = resolved_client.id if resolved_client else None

        # 2. Services
        services = self.services.get_by_ids(tenant_id, service_ids)
        if not services:
            raise NoValidServicesError()

        if not self.professionals.get_by_id(tenant_id, professional_id):
            raise ProfessionalNotFoundError(professional_id)

        # 3. Totals
        total_duration = sum(service.duration for service in services)
        total_price = sum((Decimal(service.price) for service in services), Decimal("0"))
        start = to_utc(start_time, self.conflicts.tenant_zone(tenant_id))
        end = add_minutes(start, total_duration)

        self.conflicts.ensure_available(tenant_id, professional_id, start, total_duration)

        # 4. Appointment row
        appointment = self.appointments.insert(Appointment(
            tenant_id=tenant_id,
            client_id=client_id,
            professional_id=professional_id,
            start_time=start,
            end_time=end,
            status=AppointmentStatus.SCHEDULED.value,
            notes=notes,
            total_duration=total_duration,
            total_price=total_price,
        ))
        appointment_id = appointment.id

        # 5. Line items, in selection order
        line_items = [
            AppointmentLineItem(
                tenant_id=tenant_id,
                appointment_id=appointment_id,
                service_id=service.id,
                service_name_at_booking=service.name,
                price_at_booking=service.price,
                duration_at_booking=service.duration,
                order_index=index,
            )
            for index, service in enumerate(services)
        ]

        try:
            self.appointments.insert_line_items(line_items)
        except Exception as e:
            logger.error(f"Failed to insert services for appointment {appointment_id}: {e}")
            # 6. Compensation
            self._rollback_appointment(tenant_id, appointment_id, e)
            raise

        logger.info(
            f"Created appointment {appointment_id} for professional {professional_id} "
            f"at {start.isoformat()} ({total_duration} min)"
        )

        # 7. Audit
        self.event_log.record(tenant_id, appointment_id, EventType.CREATED, actor, {
            "service_ids": [service.id for service in services],
            "professional_id": professional_id,
            "client_id": client_id,
        })

        # 8. Hydrated result
        result = self.appointments.get_by_id(tenant_id, appointment_id)
        if not result:
            logger.critical(f"Appointment {appointment_id} was committed but could not be re-read")
            raise AppointmentFetchError(appointment_id)

        return result

    def create_public_booking(self, tenant_id: UUID, request: PublicBookingRequest) -> BookingResult:
        """Public flow: find-or-create the client by phone, book, and summarise"""
        client = self.client_service.find_or_create(
            tenant_id, request.client_name, request.client_phone, request.client_email
        )

        appointment = self.create_booking(
            tenant_id=tenant_id,
            professional_id=request.professional_id,
            service_ids=request.service_ids,
            start_time=request.start_time,
            client=ClientIdentity(client_id=client.id),
            actor=Actor(type=ActorType.CLIENT, id=client.user_id),
            notes=request.notes,
        )

        summary = BookingSummary(
            services=[
                BookingSummaryService(
                    name=item.service_name_at_booking,
                    duration=item.duration_at_booking,
                    price=item.price_at_booking,
                )
                for item in appointment.services
            ],
            total_duration=appointment.total_duration,
            total_price=appointment.total_price,
            professional_name=appointment.professional.name,
            date_time=as_utc(appointment.start_time),
        )

        return BookingResult(
            appointment=AppointmentResponse.model_validate(appointment),
            client=ClientSummary.model_validate(client),
            summary=summary,
        )

    # ------------------------------------------------------------------

    def _resolve_client(self, tenant_id: UUID, identity: Optional[ClientIdentity]) -> Optional[Client]:
        if identity is None:
            return None

        if identity.client_id:
            client = self.clients.get_by_id(tenant_id, identity.client_id)
            if not client:
                raise ValidationFailure(f"Client not found: {identity.client_id}")
            return client

        if identity.name and identity.phone:
            return self.client_service.find_or_create(
                tenant_id, identity.name, identity.phone, identity.email
            )

        raise ValidationFailure("Client requires an id, or a name and phone")

    def _rollback_appointment(self, tenant_id: UUID, appointment_id: UUID, cause: Exception) -> None:
        try:
            self.appointments.delete(tenant_id, appointment_id)
            logger.warning(f"Rolled back appointment {appointment_id} after line item failure")
        except Exception as rollback_error:
            logger.critical(
                f"Compensation failed, appointment {appointment_id} left without services: {rollback_error}",
                exc_info=True
            )
            raise CompensationError(appointment_id, original=cause) from rollback_error

