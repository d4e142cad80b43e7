"""
Shared stubs for service-level tests.
"""

from typing import Dict, List, Optional, Set

import pendulum
import pytest

from cabinbooking.config import AppConfig
from cabinbooking.domain.availability import AvailabilityCalculator
from cabinbooking.domain.exceptions import CalendarAPIError, NotificationError, PersistenceError
from cabinbooking.domain.models import DEFAULT_BUSINESS_HOURS, Booking, BookingStatus
from cabinbooking.services.booking_service import BookingService

FIXED_NOW = "2024-11-20T08:00:00Z"


class StubCalendarSource:
    """Minimal stub matching CalendarSourceProtocol."""

    def __init__(self, booked: Optional[Dict[str, Set[str]]] = None, fail: bool = False):
        self._booked = booked or {}
        self.fail = fail
        self.fail_notifications = False
        self.fetch_calls: List[tuple] = []
        self.events: List[dict] = []

    def fetch_booked_times(self, cabin_id, date):
        self.fetch_calls.append((cabin_id, date))
        if self.fail:
            raise CalendarAPIError("webhook unreachable")
        return set(self._booked.get(cabin_id, set()))

    def notify_new_booking(self, booking):
        if self.fail_notifications:
            raise CalendarAPIError("webhook unreachable")
        self.events.append({"type": "new_booking", "booking": booking})

    def notify_cancellation(self, booking_id, cabin_id):
        self.events.append({"type": "cancel_booking", "bookingId": booking_id, "cabin": cabin_id})


class StubConfirmationSender:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: List[tuple] = []

    def send_confirmation(self, request, cabin):
        if self.fail:
            raise NotificationError("502 Bad Gateway")
        self.sent.append((request, cabin))


class StubRepository:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.records: Dict[str, dict] = {}

    def create(self, record):
        if self.fail:
            raise PersistenceError("disk full")
        booking_id = f"b{len(self.records) + 1}"
        self.records[booking_id] = dict(record)
        return booking_id

    def update_status(self, booking_id, status: BookingStatus, updated_at):
        self.records[booking_id]["status"] = status.value
        self.records[booking_id]["updatedAt"] = updated_at

    def list_by_user(self, user_id):
        return [
            Booking.from_record(booking_id, record)
            for booking_id, record in self.records.items()
            if record["userId"] == user_id
        ]


@pytest.fixture
def calendar_source():
    return StubCalendarSource()


@pytest.fixture
def confirmation_sender():
    return StubConfirmationSender()


@pytest.fixture
def repository():
    return StubRepository()


@pytest.fixture
def service(calendar_source, confirmation_sender, repository):
    return BookingService(
        catalog=AppConfig().build_catalog(),
        calculator=AvailabilityCalculator(business_hours=DEFAULT_BUSINESS_HOURS),
        calendar_source=calendar_source,
        confirmation_sender=confirmation_sender,
        repository=repository,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def monday():
    return pendulum.date(2024, 11, 25)


@pytest.fixture
def fixed_now():
    return FIXED_NOW
