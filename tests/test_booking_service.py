"""Tests for the booking transaction coordinator"""
import uuid
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from app.core.exceptions import (
    CompensationError,
    NoValidServicesError,
    ProfessionalNotFoundError,
    SlotConflictError,
    ValidationFailure,
)
from app.models import Appointment, AppointmentEvent, AppointmentLineItem, Client, Professional
from app.models.appointment import ActorType
from app.repositories.appointment_repository import AppointmentRepository
from app.schemas.appointment import Actor, ClientIdentity, PublicBookingRequest
from app.services.availability.availability_service import AvailabilityService
from app.services.booking.booking_service import BookingService

from tests.conftest import MONDAY, at

STAFF = Actor(type=ActorType.STAFF)


@pytest.fixture
def booking(db):
    return BookingService.for_session(db)


class FailingLineItems(AppointmentRepository):
    def insert_line_items(self, line_items):
        raise OperationalError("INSERT INTO appointment_services", {}, Exception("disk full"))


class FailingCompensation(FailingLineItems):
    def delete(self, tenant_id, appointment_id):
        raise OperationalError("DELETE FROM appointments", {}, Exception("connection lost"))


class TestCatalog:

    def test_total_duration(self, booking, tenant, haircut, beard_trim):
        assert booking.get_total_duration(tenant.id, [haircut.id, beard_trim.id]) == 50

    def test_total_duration_without_known_services(self, booking, tenant):
        with pytest.raises(NoValidServicesError):
            booking.get_total_duration(tenant.id, [uuid.uuid4()])

    def test_professionals_for_services(self, db, booking, tenant, professional, haircut, beard_trim):
        other = Professional(tenant_id=tenant.id, name="Bruno")
        db.add(other)
        db.commit()

        found = booking.get_professionals_for_services(tenant.id, [haircut.id, beard_trim.id])

        assert [p.id for p in found] == [professional.id]

    def test_active_services_sorted_by_name(self, booking, tenant, haircut, beard_trim):
        assert [s.name for s in booking.get_active_services(tenant.id)] == ["Beard trim", "Haircut"]


class TestCreateBooking:

    def test_totals_and_line_items(self, booking, tenant, professional, haircut, beard_trim):
        appointment = booking.create_booking(
            tenant.id, professional.id, [haircut.id, beard_trim.id], at(MONDAY, 10), None, STAFF
        )

        assert appointment.total_duration == 50
        assert appointment.total_price == Decimal("80")
        assert appointment.status == "scheduled"
        assert appointment.client_id is None
        assert (appointment.end_time - appointment.start_time) == timedelta(minutes=50)
        assert [item.service_name_at_booking for item in appointment.services] == ["Haircut", "Beard trim"]
        assert [item.order_index for item in appointment.services] == [0, 1]

    def test_unknown_service_ids_are_dropped(self, booking, tenant, professional, haircut):
        appointment = booking.create_booking(
            tenant.id, professional.id, [uuid.uuid4(), haircut.id], at(MONDAY, 10), None, STAFF
        )

        assert appointment.total_duration == 30
        assert len(appointment.services) == 1

    def test_snapshot_survives_price_change(self, db, booking, tenant, professional, haircut):
        appointment = booking.create_booking(
            tenant.id, professional.id, [haircut.id], at(MONDAY, 10), None, STAFF
        )
        haircut.price = Decimal("65.00")
        db.commit()

        reloaded = booking.appointments.get_by_id(tenant.id, appointment.id)
        assert reloaded.services[0].price_at_booking == Decimal("50")
        assert reloaded.total_price == Decimal("50")

    def test_created_event(self, db, booking, tenant, professional, haircut):
        appointment = booking.create_booking(
            tenant.id, professional.id, [haircut.id], at(MONDAY, 10), None, STAFF
        )

        events = db.query(AppointmentEvent).filter(AppointmentEvent.appointment_id == appointment.id).all()
        assert len(events) == 1
        assert events[0].event_type == "created"
        assert events[0].actor_type == "staff"
        assert events[0].payload["service_ids"] == [str(haircut.id)]
        assert events[0].payload["professional_id"] == str(professional.id)

    def test_slot_conflict(self, db, booking, tenant, professional, haircut):
        booking.create_booking(tenant.id, professional.id, [haircut.id], at(MONDAY, 10), None, STAFF)

        with pytest.raises(SlotConflictError):
            booking.create_booking(tenant.id, professional.id, [haircut.id], at(MONDAY, 10, 15), None, STAFF)

        assert db.query(Appointment).count() == 1

    def test_back_to_back_bookings(self, booking, tenant, professional, haircut):
        booking.create_booking(tenant.id, professional.id, [haircut.id], at(MONDAY, 10), None, STAFF)
        second = booking.create_booking(
            tenant.id, professional.id, [haircut.id], at(MONDAY, 10, 30), None, STAFF
        )

        assert second.id is not None

    def test_no_valid_services(self, booking, tenant, professional):
        with pytest.raises(NoValidServicesError):
            booking.create_booking(tenant.id, professional.id, [uuid.uuid4()], at(MONDAY, 10), None, STAFF)

    def test_unknown_professional(self, booking, tenant, haircut):
        with pytest.raises(ProfessionalNotFoundError):
            booking.create_booking(tenant.id, uuid.uuid4(), [haircut.id], at(MONDAY, 10), None, STAFF)

    def test_unknown_client_id(self, booking, tenant, professional, haircut):
        with pytest.raises(ValidationFailure):
            booking.create_booking(
                tenant.id, professional.id, [haircut.id], at(MONDAY, 10),
                ClientIdentity(client_id=uuid.uuid4()), STAFF
            )

    def test_client_identity_without_phone(self, booking, tenant, professional, haircut):
        with pytest.raises(ValidationFailure):
            booking.create_booking(
                tenant.id, professional.id, [haircut.id], at(MONDAY, 10),
                ClientIdentity(name="Maria"), STAFF
            )

    def test_books_for_a_new_client(self, db, booking, tenant, professional, haircut):
        appointment = booking.create_booking(
            tenant.id, professional.id, [haircut.id], at(MONDAY, 10),
            ClientIdentity(name="Maria Silva", phone="(11) 98765-4321"), STAFF
        )

        assert appointment.client.phone == "11987654321"
        assert db.query(Client).count() == 1

    def test_naive_start_time_is_tenant_local(self, db, booking, tenant, professional, haircut):
        tenant.timezone = "America/Sao_Paulo"
        db.commit()

        appointment = booking.create_booking(
            tenant.id, professional.id, [haircut.id], datetime(2026, 10, 19, 9, 0), None, STAFF
        )

        assert appointment.start_time.replace(tzinfo=None) == datetime(2026, 10, 19, 12, 0)
        slots = AvailabilityService.for_session(db).get_available_slots(
            tenant.id, professional.id, MONDAY, 30
        )
        assert {s.time: s.available for s in slots}["09:00"] is False

class TestAtomicity:

    def test_line_item_failure_removes_the_appointment(self, db, booking, tenant, professional, haircut):
        booking.appointments = FailingLineItems(db)

        with pytest.raises(OperationalError):
            booking.create_booking(tenant.id, professional.id, [haircut.id], at(MONDAY, 10), None, STAFF)

        assert db.query(Appointment).count() == 0
        assert db.query(AppointmentLineItem).count() == 0
        assert db.query(AppointmentEvent).count() == 0

    def test_failed_compensation_is_reported(self, db, booking, tenant, professional, haircut):
        booking.appointments = FailingCompensation(db)

        with pytest.raises(CompensationError) as exc_info:
            booking.create_booking(tenant.id, professional.id, [haircut.id], at(MONDAY, 10), None, STAFF)

        assert isinstance(exc_info.value.original, OperationalError)
        assert db.query(Appointment).count() == 1


class TestAuditFailure:

    def test_booking_succeeds_when_audit_write_fails(self, booking, tenant, professional, haircut):
        class BrokenEvents:
            def insert(self, event):
                raise OperationalError("INSERT INTO appointment_events", {}, Exception("timeout"))

        queued = []
        booking.event_log.events = BrokenEvents()
        booking.event_log.dead_letter = queued.append

        appointment = booking.create_booking(
            tenant.id, professional.id, [haircut.id], at(MONDAY, 10), None, STAFF
        )

        assert appointment.id is not None
        assert len(queued) == 1
        assert queued[0].appointment_id == appointment.id
        assert queued[0].event_type == "created"


class TestPublicBooking:

    def _request(self, professional, services, phone="(11) 98765-4321", name="Maria Silva", **extra):
        return PublicBookingRequest(
            professional_id=professional.id,
            service_ids=[s.id for s in services],
            start_time=at(MONDAY, 14),
            client_name=name,
            client_phone=phone,
            **extra
        )

    def test_summary(self, booking, tenant, professional, haircut, beard_trim):
        result = booking.create_public_booking(
            tenant.id, self._request(professional, [haircut, beard_trim], client_email="maria@example.com")
        )

        assert result.client.phone == "11987654321"
        assert result.client.email == "maria@example.com"
        assert result.summary.total_duration == 50
        assert result.summary.total_price == Decimal("80")
        assert result.summary.professional_name == "Ana"
        assert [s.name for s in result.summary.services] == ["Haircut", "Beard trim"]
        assert result.appointment.client_id == result.client.id

    def test_created_event_is_attributed_to_the_client(self, db, booking, tenant, professional, haircut):
        result = booking.create_public_booking(tenant.id, self._request(professional, [haircut]))

        event = db.query(AppointmentEvent).filter(
            AppointmentEvent.appointment_id == result.appointment.id
        ).one()
        assert event.actor_type == "client"

    def test_returning_client_is_matched_by_phone(self, db, booking, tenant, professional, haircut):
        first = booking.create_public_booking(tenant.id, self._request(professional, [haircut]))

        second_request = self._request(professional, [haircut], phone="11 98765 4321", name="Maria S.")
        second_request.start_time = at(MONDAY, 15)
        second = booking.create_public_booking(tenant.id, second_request)

        assert second.client.id == first.client.id
        assert second.client.name == "Maria S."
        assert db.query(Client).count() == 1
