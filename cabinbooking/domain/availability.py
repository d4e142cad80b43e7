"""
Core business logic for calculating bookable time slots.

Pure domain logic without any external dependencies (no API calls, no
database, no I/O).
"""

from datetime import date as Date
from typing import Iterable, Iterator, List

from .models import BusinessHours, OpeningHours, TimeSlot

SLOT_MINUTES = 15


class AvailabilityCalculator:
    """
    Derives the slot grid for a day and marks booked slots.

    Algorithm:
    1. Look up the opening hours for the date's weekday
    2. Enumerate every quarter hour from opening up to (excluding) closing
    3. Mark a slot unavailable if its exact "HH:MM" label was booked
    """

    def __init__(self, business_hours: BusinessHours):
        self.business_hours = business_hours

    def compute(self, date: Date, booked_times: Iterable[str]) -> List[TimeSlot]:
        """
        Compute all slots for a date.

        Args:
            date: Day to compute slots for
            booked_times: "HH:MM" start times that are already taken

        Returns:
            Chronologically ordered TimeSlot list

        Raises:
            BusinessHoursError: If the weekday has no opening hours
        """
        hours = self.business_hours.for_day(date)
        booked = set(booked_times)

        return [
            TimeSlot(time=label, available=label not in booked)
            for label in self._slot_labels(hours)
        ]

    def is_offered(self, date: Date, time: str) -> bool:
        """
        Check whether ``time`` is one of the day's slots, ignoring bookings.

        Raises:
            BusinessHoursError: If the weekday has no opening hours
        """
        return time in self._slot_labels(self.business_hours.for_day(date))

    @staticmethod
    def _slot_labels(hours: OpeningHours) -> Iterator[str]:
        for hour in range(hours.start_hour, hours.end_hour):
            for minute in range(0, 60, SLOT_MINUTES):
                yield f"{hour:02d}:{minute:02d}"


def is_on_slot_grid(time: str) -> bool:
    """Check that a string is a zero-padded "HH:MM" on the quarter-hour grid."""
    if len(time) != 5 or time[2] != ":":
        return False
    hour, minute = time[:2], time[3:]
    if not (hour.isdigit() and minute.isdigit()):
        return False
    return int(hour) < 24 and int(minute) % SLOT_MINUTES == 0 and int(minute) < 60
