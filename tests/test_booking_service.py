"""
Tests for the BookingService orchestration layer.
"""

import logging
from unittest.mock import MagicMock, patch

import pendulum
import pytest

from cabinbooking.adapters.cabin_webhook import CabinWebhookClient
from cabinbooking.config import AppConfig
from cabinbooking.domain.availability import AvailabilityCalculator
from cabinbooking.domain.exceptions import (
    BookingSubmissionError,
    BookingValidationError,
    InvalidCabinError,
)
from cabinbooking.domain.models import DEFAULT_BUSINESS_HOURS, BookingRequest, BookingStatus
from cabinbooking.services.booking_service import BookingService


def _request(**overrides) -> BookingRequest:
    values = dict(
        cabin_id="lying-1",
        date=pendulum.date(2024, 11, 25),
        time="10:15",
        full_name="Jonas Jonaitis",
        email="jonas@example.com",
    )
    values.update(overrides)
    return BookingRequest(**values)


class TestGetTimeSlots:
    """Availability lookups through the service."""

    def test_uses_booked_times_from_calendar_source(self, service, calendar_source, monday):
        calendar_source._booked = {"lying-1": {"09:00", "14:30"}}

        result = service.get_time_slots("lying-1", monday)

        assert result.ok
        assert len(result.slots) == 44
        assert [slot.time for slot in result.slots if not slot.available] == ["09:00", "14:30"]
        assert calendar_source.fetch_calls == [("lying-1", monday)]

    @pytest.mark.parametrize("cabin_id", ["", "sauna-1"])
    def test_invalid_cabin_fails_before_fetch(self, service, calendar_source, monday, cabin_id):
        with pytest.raises(InvalidCabinError):
            service.get_time_slots(cabin_id, monday)

        assert calendar_source.fetch_calls == []

    def test_fetch_failure_degrades_to_error_result(self, service, calendar_source, monday, caplog):
        calendar_source.fail = True

        with caplog.at_level(logging.WARNING):
            result = service.get_time_slots("lying-1", monday)

        assert not result.ok
        assert result.slots == []
        assert not result.fully_booked
        assert "webhook unreachable" in result.error
        assert "Could not load time slots" in caplog.text

    def test_malformed_webhook_items_degrade_to_error_result(self, confirmation_sender, repository, monday):
        response = MagicMock()
        response.json.return_value = {"items": 5}
        service = BookingService(
            catalog=AppConfig().build_catalog(),
            calculator=AvailabilityCalculator(business_hours=DEFAULT_BUSINESS_HOURS),
            calendar_source=CabinWebhookClient(endpoints={"lying-1": "https://hooks.test/lying-1"}),
            confirmation_sender=confirmation_sender,
            repository=repository,
        )

        with patch("cabinbooking.adapters.cabin_webhook.requests.post", return_value=response):
            result = service.get_time_slots("lying-1", monday)

        assert not result.ok
        assert result.slots == []
        assert "'items' must be a list" in result.error


class TestSubmitBooking:
    """Booking submission ordering and failure handling."""

    def test_successful_booking_is_confirmed_stored_and_published(
        self, service, confirmation_sender, repository, calendar_source, fixed_now
    ):
        booking = service.submit_booking(_request(), user_id="user-1")

        assert booking.id == "b1"
        assert booking.status is BookingStatus.CONFIRMED
        assert booking.created_at == booking.updated_at == fixed_now
        assert len(confirmation_sender.sent) == 1
        assert repository.records["b1"] == {
            "cabin": "lying-1",
            "date": "2024-11-25",
            "time": "10:15",
            "userId": "user-1",
            "userEmail": "jonas@example.com",
            "status": "confirmed",
            "createdAt": fixed_now,
            "updatedAt": fixed_now,
        }
        assert calendar_source.events[0]["type"] == "new_booking"
        assert calendar_source.events[0]["booking"].id == "b1"

    def test_confirmation_failure_stores_nothing(self, service, confirmation_sender, repository, calendar_source):
        confirmation_sender.fail = True

        with pytest.raises(BookingSubmissionError):
            service.submit_booking(_request())

        assert repository.records == {}
        assert calendar_source.events == []

    def test_store_failure_after_confirmation_is_logged_not_raised(
        self, service, repository, confirmation_sender, caplog
    ):
        repository.fail = True

        with caplog.at_level(logging.ERROR):
            booking = service.submit_booking(_request())

        assert booking.id is None
        assert booking.status is BookingStatus.CONFIRMED
        assert len(confirmation_sender.sent) == 1
        assert "confirmed but not fully recorded" in caplog.text

    def test_webhook_failure_after_store_keeps_booking(self, service, calendar_source, repository):
        calendar_source.fail_notifications = True

        booking = service.submit_booking(_request())

        assert booking.id == "b1"
        assert "b1" in repository.records

    @pytest.mark.parametrize(
        "overrides",
        [
            {"full_name": ""},
            {"email": "  "},
            {"time": ""},
            {"email": "not-an-email"},
            {"time": "10:07"},
        ],
    )
    def test_invalid_requests_are_rejected(self, service, confirmation_sender, overrides):
        with pytest.raises(BookingValidationError):
            service.submit_booking(_request(**overrides))

        assert confirmation_sender.sent == []

    @pytest.mark.parametrize("time", ["18:00", "14:00", "08:45"])
    def test_time_outside_opening_hours_is_rejected(self, service, confirmation_sender, repository, time):
        """Sunday is open 09:00-14:00; other grid times never produce a record."""
        with pytest.raises(BookingValidationError, match="outside opening hours"):
            service.submit_booking(_request(date=pendulum.date(2024, 12, 1), time=time))

        assert confirmation_sender.sent == []
        assert repository.records == {}

    def test_unknown_cabin_is_rejected(self, service, confirmation_sender):
        with pytest.raises(InvalidCabinError):
            service.submit_booking(_request(cabin_id="sauna-1"))

        assert confirmation_sender.sent == []


class TestCancelBooking:
    """Cancellation and user booking listing."""

    def test_cancel_marks_record_and_publishes(self, service, repository, calendar_source):
        booking = service.submit_booking(_request(), user_id="user-1")

        service.cancel_booking(booking.id, "lying-1")

        assert repository.records[booking.id]["status"] == "cancelled"
        assert calendar_source.events[-1] == {
            "type": "cancel_booking",
            "bookingId": booking.id,
            "cabin": "lying-1",
        }

    def test_cancel_with_invalid_cabin_fails_fast(self, service, repository):
        booking = service.submit_booking(_request())

        with pytest.raises(InvalidCabinError):
            service.cancel_booking(booking.id, "")

        assert repository.records[booking.id]["status"] == "confirmed"

    def test_get_user_bookings(self, service):
        service.submit_booking(_request(), user_id="user-1")
        service.submit_booking(_request(time="11:00"), user_id="user-2")

        bookings = service.get_user_bookings("user-1")

        assert [b.time for b in bookings] == ["10:15"]
