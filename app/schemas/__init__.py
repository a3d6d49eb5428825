# app/schemas/__init__.py
from .availability import TimeRange, TimeSlot
from .appointment import (
    Actor,
    AppointmentResponse,
    AppointmentUpdateRequest,
    BookingRequest,
    BookingResult,
    PublicBookingRequest,
    StatusUpdateRequest,
)

__all__ = [
    "TimeRange",
    "TimeSlot",
    "Actor",
    "AppointmentResponse",
    "AppointmentUpdateRequest",
    "BookingRequest",
    "BookingResult",
    "PublicBookingRequest",
    "StatusUpdateRequest",
]
