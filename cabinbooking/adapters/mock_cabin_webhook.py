"""
Mock webhook and confirmation clients for running without the real automations.
"""

import json
import logging
from datetime import date as Date
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

import pendulum
from pendulum import DateTime

from ..domain.exceptions import InvalidCabinError
from ..domain.models import Booking, BookingRequest, Cabin

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).parent / "mock_booked_slots.json"


class MockCabinWebhookClient:
    """
    Mock client that simulates the cabin calendar webhooks.

    Booked events are loaded from mock_booked_slots.json; booking and
    cancellation events are recorded in ``sent_events`` instead of being posted.
    """

    def __init__(
        self,
        cabin_ids: List[str],
        timezone: str = "Europe/Vilnius",
        data_file: Optional[Path] = None,
    ):
        """
        Initialize the mock client.

        Args:
            cabin_ids: Cabins that have a (simulated) webhook
            timezone: IANA timezone the salon operates in
            data_file: Optional JSON file with mock calendar events
        """
        self.cabin_ids = set(cabin_ids)
        self.timezone = timezone
        self.sent_events: List[Dict[str, Any]] = []
        self._load_calendar_data(data_file or DEFAULT_DATA_FILE)

    def _load_calendar_data(self, data_file: Path):
        """Load mock calendar events from JSON file."""
        if data_file.exists():
            with open(data_file, "r", encoding="utf-8") as f:
                self.calendar_events = json.load(f)
        else:
            # Fallback to empty if file doesn't exist
            self.calendar_events = []

    def fetch_booked_times(self, cabin_id: str, date: Date) -> Set[str]:
        """Return booked "HH:MM" times for the cabin from the mock data."""
        if cabin_id not in self.cabin_ids:
            raise InvalidCabinError(f"Invalid cabin id: '{cabin_id}'")

        booked: Set[str] = set()
        for event in self.calendar_events:
            if event.get("cabinId") != cabin_id:
                continue

            try:
                start = self._event_start(event)
            except (KeyError, TypeError, ValueError) as e:
                logger.debug("Skipping mock event %r: %s", event, e)
                continue

            if start.date() == date:
                booked.add(start.format("HH:mm"))

        return booked

    def _event_start(self, event: Dict[str, Any]) -> DateTime:
        """
        Resolve an event's start in the salon timezone.

        Events either carry an absolute ISO ``start`` or a ``daysFromToday``
        offset plus local ``time``, so the demo data always falls inside the
        bookable week.
        """
        if "daysFromToday" in event:
            day = pendulum.today(self.timezone).add(days=int(event["daysFromToday"]))
            hour, minute = (int(part) for part in event["time"].split(":"))
            return day.set(hour=hour, minute=minute)

        dt = pendulum.parse(event["start"], tz=self.timezone)
        if not isinstance(dt, DateTime):
            raise ValueError(f"Not a datetime: {event['start']}")
        return dt.in_timezone(self.timezone)

    def notify_new_booking(self, booking: Booking) -> None:
        self.sent_events.append(
            {"type": "new_booking", "booking": {**booking.to_record(), "id": booking.id}}
        )

    def notify_cancellation(self, booking_id: str, cabin_id: str) -> None:
        self.sent_events.append({"type": "cancel_booking", "bookingId": booking_id})


class MockConfirmationClient:
    """
    Mock confirmation endpoint that records requests instead of sending them.
    """

    def __init__(self, timezone: str = "Europe/Vilnius"):
        self.timezone = timezone
        self.sent: List[Dict[str, Any]] = []

    def send_confirmation(self, request: BookingRequest, cabin: Cabin) -> None:
        payload = {
            "fullName": request.full_name,
            "email": request.email,
            "dateTime": f"{request.date.isoformat()}T{request.time}:00",
            "timeZone": self.timezone,
            "cabin": cabin.id,
            "cabinName": cabin.name,
        }
        self.sent.append(payload)
        logger.info("Mock confirmation recorded for %s", request.email)
