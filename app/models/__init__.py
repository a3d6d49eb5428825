from .base import Base
from .tenant import Tenant
from .service import Service
from .professional import Professional, professional_services
from .client import Client
from .schedule_override import ScheduleOverride, OverrideType
from .appointment import (
    Appointment,
    AppointmentLineItem,
    AppointmentEvent,
    AppointmentStatus,
    EventType,
    ActorType,
)

__all__ = [
    "Base",
    "Tenant",
    "Service",
    "Professional",
    "professional_services",
    "Client",
    "ScheduleOverride",
    "OverrideType",
    "Appointment",
    "AppointmentLineItem",
    "AppointmentEvent",
    "AppointmentStatus",
    "EventType",
    "ActorType",
]
