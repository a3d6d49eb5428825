# app/core/exceptions.py
"""Domain errors raised by the booking core"""
from typing import Optional


class BookingCoreError(Exception):
    """Base class for all booking core errors"""


class NotFoundError(BookingCoreError):
    """A tenant, professional or appointment does not exist"""


class TenantNotFoundError(NotFoundError):
    def __init__(self, tenant_ref):
        super().__init__(f"Tenant not found: {tenant_ref}")
        self.tenant_ref = tenant_ref


class ProfessionalNotFoundError(NotFoundError):
    def __init__(self, professional_id):
        super().__init__(f"Professional not found: {professional_id}")
        self.professional_id = professional_id


class AppointmentNotFoundError(NotFoundError):
    def __init__(self, appointment_id):
        super().__init__("Appointment not found")
        self.appointment_id = appointment_id


class ValidationFailure(BookingCoreError):
    """Input that cannot produce a valid booking"""


class NoValidServicesError(ValidationFailure):
    def __init__(self):
        super().__init__("No valid services found")


class SlotConflictError(BookingCoreError):
    """The requested interval overlaps another appointment or an unavailable override"""

    def __init__(self, professional_id, start_time=None, end_time=None):
        if start_time is not None and end_time is not None:
            message = (
                f"Professional {professional_id} is not available "
                f"between {start_time.isoformat()} and {end_time.isoformat()}"
            )
        else:
            message = f"Professional {professional_id} is not available at the requested time"
        super().__init__(message)
        self.professional_id = professional_id
        self.start_time = start_time
        self.end_time = end_time


class InvalidTransitionError(BookingCoreError):
    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot change appointment status from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested


class CompensationError(BookingCoreError):
    """Rolling back a partially created appointment failed; orphaned state remains"""

    def __init__(self, appointment_id, original: Optional[BaseException] = None):
        super().__init__(f"Failed to roll back appointment {appointment_id}")
        self.appointment_id = appointment_id
        self.original = original


class AppointmentFetchError(BookingCoreError):
    """Appointment was committed but could not be re-read"""

    def __init__(self, appointment_id, message: str = "Failed to fetch created appointment"):
        super().__init__(message)
        self.appointment_id = appointment_id
