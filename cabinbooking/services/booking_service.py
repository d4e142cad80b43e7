"""
Application services for checking availability and booking cabins.

The service coordinates the cabin catalog, the calendar webhook adapter, the
confirmation endpoint and the booking store, and delegates the slot grid to
the domain-level ``AvailabilityCalculator``. Every dependency is typed by a
small protocol so tests and the CLI's mock mode can plug in stand-ins.
"""

from __future__ import annotations

import logging
import re
from datetime import date as Date
from typing import Callable, List, Protocol, Set

import pendulum

from ..domain.availability import AvailabilityCalculator, is_on_slot_grid
from ..domain.exceptions import (
    BookingError,
    BookingSubmissionError,
    BookingValidationError,
    BusinessHoursError,
    CalendarAPIError,
    NotificationError,
)
from ..domain.models import (
    AvailabilityResult,
    Booking,
    BookingRequest,
    BookingStatus,
    Cabin,
    CabinCatalog,
)

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class CalendarSourceProtocol(Protocol):
    """Where booked times come from and booking events go to."""

    def fetch_booked_times(self, cabin_id: str, date: Date) -> Set[str]:
        """Return booked "HH:MM" start times for the cabin on the date."""

    def notify_new_booking(self, booking: Booking) -> None:
        """Publish a newly stored booking."""

    def notify_cancellation(self, booking_id: str, cabin_id: str) -> None:
        """Publish a cancellation."""


class ConfirmationSenderProtocol(Protocol):
    def send_confirmation(self, request: BookingRequest, cabin: Cabin) -> None:
        """Confirm a booking to the visitor."""


class BookingRepositoryProtocol(Protocol):
    def create(self, record: dict) -> str:
        """Store a record and return its id."""

    def update_status(self, booking_id: str, status: BookingStatus, updated_at: str) -> None:
        """Change a stored booking's status."""

    def list_by_user(self, user_id: str) -> List[Booking]:
        """Return a user's bookings."""


def utc_now_iso() -> str:
    return pendulum.now("UTC").to_iso8601_string()


class BookingService:
    """
    Orchestrates availability lookups, booking submission and cancellation.
    """

    def __init__(
        self,
        catalog: CabinCatalog,
        calculator: AvailabilityCalculator,
        calendar_source: CalendarSourceProtocol,
        confirmation_sender: ConfirmationSenderProtocol,
        repository: BookingRepositoryProtocol,
        clock: Callable[[], str] = utc_now_iso,
    ) -> None:
        self.catalog = catalog
        self._calculator = calculator
        self._calendar_source = calendar_source
        self._confirmation_sender = confirmation_sender
        self._repository = repository
        self._clock = clock

    def get_time_slots(self, cabin_id: str, date: Date) -> AvailabilityResult:
        """
        Fetch booked times and compute the slot grid for a cabin and day.

        A failing calendar source yields a result with ``error`` set and no
        slots instead of raising.

        Raises:
            InvalidCabinError: If the cabin id is blank or unknown
        """
        cabin = self.catalog.get(cabin_id)

        try:
            booked_times = self._calendar_source.fetch_booked_times(cabin.id, date)
            slots = self._calculator.compute(date, booked_times)
        except (CalendarAPIError, BusinessHoursError) as exc:
            logger.warning("Could not load time slots for %s on %s: %s", cabin.id, date, exc)
            return AvailabilityResult(cabin_id=cabin.id, date=date, error=str(exc))

        logger.debug(
            "%s on %s: %d slots, %d booked",
            cabin.id,
            date,
            len(slots),
            sum(1 for slot in slots if not slot.available),
        )
        return AvailabilityResult(cabin_id=cabin.id, date=date, slots=slots)

    def submit_booking(self, request: BookingRequest, user_id: str = "anonymous") -> Booking:
        """
        Confirm a booking, then store it and publish it to the cabin webhook.

        The confirmation is the commit point: if it fails nothing is stored.
        A failure while storing or publishing afterwards is logged and the
        booking is still returned (with ``id`` None if it was not stored).

        Raises:
            InvalidCabinError: If the cabin id is blank or unknown
            BookingValidationError: If a field is missing or malformed
            BookingSubmissionError: If the confirmation could not be sent
        """
        cabin = self.catalog.get(request.cabin_id)
        self._validate_request(request)
        self._check_within_opening_hours(request)

        try:
            self._confirmation_sender.send_confirmation(request, cabin)
        except NotificationError as exc:
            logger.error("Booking confirmation failed for %s %s %s: %s",
                         cabin.id, request.date, request.time, exc)
            raise BookingSubmissionError("Booking could not be confirmed, please try again.") from exc

        now = self._clock()
        booking = Booking(
            cabin_id=cabin.id,
            date=request.date,
            time=request.time,
            user_id=user_id or "anonymous",
            user_email=request.email.strip(),
            status=BookingStatus.CONFIRMED,
            created_at=now,
            updated_at=now,
        )

        try:
            booking = booking.with_id(self._repository.create(booking.to_record()))
            self._calendar_source.notify_new_booking(booking)
        except BookingError as exc:
            logger.error("Booking for %s %s %s was confirmed but not fully recorded: %s",
                         cabin.id, request.date, request.time, exc)

        return booking

    def cancel_booking(self, booking_id: str, cabin_id: str) -> None:
        """
        Mark a booking cancelled and publish the cancellation.

        Raises:
            InvalidCabinError: If the cabin id is blank or unknown
            BookingNotFoundError: If the booking id is unknown
            CalendarAPIError: If the cancellation could not be published
        """
        cabin = self.catalog.get(cabin_id)
        self._repository.update_status(booking_id, BookingStatus.CANCELLED, self._clock())
        self._calendar_source.notify_cancellation(booking_id, cabin.id)
        logger.info("Cancelled booking %s for %s", booking_id, cabin.id)

    def get_user_bookings(self, user_id: str) -> List[Booking]:
        return self._repository.list_by_user(user_id)

    def _check_within_opening_hours(self, request: BookingRequest) -> None:
        try:
            offered = self._calculator.is_offered(request.date, request.time)
        except BusinessHoursError as exc:
            raise BookingValidationError(str(exc)) from exc

        if not offered:
            raise BookingValidationError(
                f"{request.time} is outside opening hours on {request.date.isoformat()}"
            )

    @staticmethod
    def _validate_request(request: BookingRequest) -> None:
        missing = [
            name
            for name, value in (
                ("time", request.time),
                ("full_name", request.full_name),
                ("email", request.email),
            )
            if not value or not value.strip()
        ]
        if request.date is None:
            missing.insert(0, "date")
        if missing:
            raise BookingValidationError(f"Missing required fields: {', '.join(missing)}")

        if not EMAIL_PATTERN.match(request.email.strip()):
            raise BookingValidationError(f"Invalid email address: '{request.email}'")

        if not is_on_slot_grid(request.time):
            raise BookingValidationError(f"Invalid time '{request.time}', expected HH:MM in 15-minute steps")
