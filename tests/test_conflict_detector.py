"""Tests for overlap detection against stored appointments and overrides"""
import uuid

import pytest

from app.core.exceptions import SlotConflictError, TenantNotFoundError
from app.models.appointment import Appointment, AppointmentStatus
from app.repositories.appointment_repository import AppointmentRepository
from app.repositories.schedule_override_repository import ScheduleOverrideRepository
from app.repositories.tenant_repository import TenantRepository
from app.services.availability.conflict_detector import ConflictDetector

from tests.conftest import MONDAY, at


@pytest.fixture
def detector(db):
    return ConflictDetector(
        TenantRepository(db), ScheduleOverrideRepository(db), AppointmentRepository(db)
    )


class TestHasConflict:

    def test_adjacent_is_free(self):
        existing = Appointment(start_time=at(MONDAY, 10), end_time=at(MONDAY, 10, 30))
        assert not ConflictDetector.has_conflict(at(MONDAY, 10, 30), at(MONDAY, 11), [existing])
        assert not ConflictDetector.has_conflict(at(MONDAY, 9, 30), at(MONDAY, 10), [existing])

    def test_overlap(self):
        existing = Appointment(start_time=at(MONDAY, 10), end_time=at(MONDAY, 10, 30))
        assert ConflictDetector.has_conflict(at(MONDAY, 10, 15), at(MONDAY, 10, 45), [existing])

    def test_naive_stored_times_compare_as_utc(self):
        existing = Appointment(
            start_time=at(MONDAY, 10).replace(tzinfo=None),
            end_time=at(MONDAY, 11).replace(tzinfo=None),
        )
        assert ConflictDetector.has_conflict(at(MONDAY, 10, 30), at(MONDAY, 11, 30), [existing])


class TestEnsureAvailable:

    def test_free_slot(self, detector, tenant, professional):
        detector.ensure_available(tenant.id, professional.id, at(MONDAY, 10), 30)

    def test_overlapping_appointment(self, detector, tenant, professional, make_appointment):
        make_appointment(at(MONDAY, 10), 60)

        with pytest.raises(SlotConflictError):
            detector.ensure_available(tenant.id, professional.id, at(MONDAY, 10, 30), 30)

    def test_cancelled_appointments_do_not_block(self, detector, tenant, professional, make_appointment):
        make_appointment(at(MONDAY, 10), 60, status=AppointmentStatus.CANCELLED.value)

        detector.ensure_available(tenant.id, professional.id, at(MONDAY, 10), 30)

    def test_excluded_appointment_is_ignored(self, detector, tenant, professional, make_appointment):
        existing = make_appointment(at(MONDAY, 10), 60)

        detector.ensure_available(
            tenant.id, professional.id, at(MONDAY, 10, 30), 60,
            exclude_appointment_id=existing.id
        )

    def test_unavailable_override_blocks(self, detector, tenant, professional, make_override):
        make_override(MONDAY)

        with pytest.raises(SlotConflictError):
            detector.ensure_available(tenant.id, professional.id, at(MONDAY, 10), 30)

    def test_available_override_does_not_block(self, detector, tenant, professional, make_override):
        make_override(MONDAY, override_type="available", start_time="12:00", end_time="14:00")

        detector.ensure_available(tenant.id, professional.id, at(MONDAY, 10), 30)

    def test_unknown_tenant(self, detector, professional):
        with pytest.raises(TenantNotFoundError):
            detector.ensure_available(uuid.uuid4(), professional.id, at(MONDAY, 10), 30)


class TestIsSlotAvailable:

    def test_reports_conflicts_as_false(self, detector, tenant, professional, make_appointment):
        make_appointment(at(MONDAY, 10), 30)

        assert detector.is_slot_available(tenant.id, professional.id, at(MONDAY, 10), 30) is False
        assert detector.is_slot_available(tenant.id, professional.id, at(MONDAY, 10, 30), 30) is True

    def test_fails_closed_on_storage_error(self, detector, tenant, professional):
        class BrokenAppointments:
            def list_active_overlapping(self, *args, **kwargs):
                raise RuntimeError("connection lost")

        detector.appointments = BrokenAppointments()

        assert detector.is_slot_available(tenant.id, professional.id, at(MONDAY, 10), 30) is False

    def test_window_end_is_exclusive(self, detector, tenant, professional, make_appointment):
        make_appointment(at(MONDAY, 11), 30)

        assert detector.is_slot_available(
            tenant.id, professional.id, at(MONDAY, 10), 60
        ) is True
        assert detector.is_slot_available(
            tenant.id, professional.id, at(MONDAY, 10), 60 + 1
        ) is False
