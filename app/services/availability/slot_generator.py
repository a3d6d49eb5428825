# app/services/availability/slot_generator.py
"""Walks open ranges in fixed steps and tags each candidate start as free or taken"""
from datetime import date
from typing import List, Sequence
from zoneinfo import ZoneInfo

from app.models.appointment import Appointment
from app.schemas.availability import TimeRange, TimeSlot
from app.services.availability.conflict_detector import ConflictDetector
from app.utils.time_ranges import format_minutes_to_time, local_instant


class SlotGenerator:

    @staticmethod
    def generate_for_range(
            time_range: TimeRange,
            slot_step: int,
            total_duration: int,
            appointments: Sequence[Appointment],
            day: date,
            zone: ZoneInfo
    ) -> List[TimeSlot]:
        """
        Every step-aligned start from range.start to range.end - total_duration
        inclusive; a slot must finish by closing time.
        """
        if slot_step <= 0 or total_duration <= 0:
            raise ValueError("slot_step and total_duration must be positive")

        slots = []
        last_possible_start = time_range.end_minutes - total_duration

        start = time_range.start_minutes
        while start <= last_possible_start:
            slot_start = local_instant(day, start, zone)
            slot_end = local_instant(day, start + total_duration, zone)
            slots.append(TimeSlot(
                time=format_minutes_to_time(start),
                available=not ConflictDetector.has_conflict(slot_start, slot_end, appointments)
            ))
            start += slot_step

        return slots

    @staticmethod
    def generate(
            ranges: Sequence[TimeRange],
            slot_step: int,
            total_duration: int,
            appointments: Sequence[Appointment],
            day: date,
            zone: ZoneInfo
    ) -> List[TimeSlot]:
        """Ranges are handled independently and concatenated in order"""
        slots = []
        for time_range in ranges:
            slots.extend(SlotGenerator.generate_for_range(
                time_range, slot_step, total_duration, appointments, day, zone
            ))
        return slots
