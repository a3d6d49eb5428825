"""
Pydantic schemas for the availability engine
"""
from datetime import date
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.utils.time_ranges import parse_time_to_minutes


class TimeRange(BaseModel):
    """Open clock range within one day, "HH:MM" to "HH:MM" """
    start: str = Field(..., pattern=r"^\d{1,2}:\d{2}(:\d{2})?$")
    end: str = Field(..., pattern=r"^\d{1,2}:\d{2}(:\d{2})?$")

    model_config = {"frozen": True}

    @property
    def start_minutes(self) -> int:
        return parse_time_to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return parse_time_to_minutes(self.end)


class TimeSlot(BaseModel):
    time: str  # HH:MM in the tenant's timezone
    available: bool


class AvailabilityResponse(BaseModel):
    professional_id: UUID
    date: date
    total_duration: int
    slots: List[TimeSlot]


class NextAvailableDateResponse(BaseModel):
    professional_id: UUID
    total_duration: int
    next_available_date: Optional[date]
