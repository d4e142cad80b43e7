"""
Selection state for one visitor working through the booking flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date as Date
from datetime import timedelta
from typing import List, Optional

from ..domain.exceptions import (
    BookingSubmissionError,
    BookingValidationError,
    SlotUnavailableError,
)
from ..domain.models import AvailabilityResult, Booking, BookingRequest, TimeSlot
from .booking_service import BookingService

LOAD_FAILED_MESSAGE = "Could not load available times."
MISSING_FIELDS_MESSAGE = "Please fill in all fields."
SUBMIT_FAILED_MESSAGE = "Something went wrong, please try again."


def bookable_dates(today: Date, days: int = 7) -> List[Date]:
    """Today and the following ``days - 1`` days."""
    return [today + timedelta(days=offset) for offset in range(days)]


@dataclass
class BookingSession:
    """
    Cabin, date and time selection plus contact details.

    Changing the cabin or date clears the chosen time and reloads the slots.
    Only a slot reported available by the last load can be selected.
    """
    service: BookingService
    today: Date
    window_days: int = 7
    cabin_id: str = ""
    date: Optional[Date] = None
    time: str = ""
    full_name: str = ""
    email: str = ""
    availability: Optional[AvailabilityResult] = None
    error: str = ""
    booking: Optional[Booking] = field(default=None)

    def __post_init__(self):
        if self.date is None:
            self.date = self.today

    @property
    def dates(self) -> List[Date]:
        return bookable_dates(self.today, self.window_days)

    @property
    def slots(self) -> List[TimeSlot]:
        return self.availability.slots if self.availability else []

    @property
    def success(self) -> bool:
        return self.booking is not None

    def select_cabin(self, cabin_id: str) -> AvailabilityResult:
        """
        Raises:
            InvalidCabinError: If the cabin id is blank or unknown
        """
        self.service.catalog.get(cabin_id)
        self.cabin_id = cabin_id
        self.time = ""
        return self.load_slots()

    def select_date(self, date: Date) -> Optional[AvailabilityResult]:
        """
        Raises:
            BookingValidationError: If the date is outside the booking window
        """
        if date not in self.dates:
            raise BookingValidationError(
                f"Date {date.isoformat()} is outside the booking window "
                f"{self.dates[0].isoformat()} - {self.dates[-1].isoformat()}"
            )
        self.date = date
        self.time = ""
        if not self.cabin_id:
            self.availability = None
            return None
        return self.load_slots()

    def load_slots(self) -> AvailabilityResult:
        self.error = ""
        self.availability = self.service.get_time_slots(self.cabin_id, self.date)
        if not self.availability.ok:
            self.error = LOAD_FAILED_MESSAGE
        return self.availability

    def select_time(self, time: str) -> None:
        """
        Raises:
            SlotUnavailableError: If the time is not an available slot
        """
        if self.availability is None or not self.availability.is_available(time):
            raise SlotUnavailableError(f"Time {time} is not available")
        self.time = time

    def can_submit(self) -> bool:
        return all(
            value and value.strip()
            for value in (self.cabin_id, self.time, self.full_name, self.email)
        )

    def submit(self, user_id: str = "anonymous") -> Booking:
        """
        Submit the current selection.

        On success the selection and contact details are reset. On failure
        the selection is kept and ``error`` carries a message for the visitor.

        Raises:
            BookingValidationError: If a field is missing or malformed
            BookingSubmissionError: If the booking could not be confirmed
        """
        if not self.can_submit():
            self.error = MISSING_FIELDS_MESSAGE
            raise BookingValidationError(MISSING_FIELDS_MESSAGE)

        self.error = ""
        request = BookingRequest(
            cabin_id=self.cabin_id,
            date=self.date,
            time=self.time,
            full_name=self.full_name.strip(),
            email=self.email.strip(),
        )

        try:
            booking = self.service.submit_booking(request, user_id=user_id)
        except BookingValidationError as exc:
            self.error = str(exc)
            raise
        except BookingSubmissionError:
            self.error = SUBMIT_FAILED_MESSAGE
            raise

        self.booking = booking
        self.cabin_id = ""
        self.time = ""
        self.availability = None
        self.full_name = ""
        self.email = ""
        return booking
