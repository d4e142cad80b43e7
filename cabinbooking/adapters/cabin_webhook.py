"""
Client for the per-cabin calendar webhooks.

Each cabin has its own automation endpoint that answers availability queries
with the calendar events for a day and receives booking/cancellation events.
"""

from __future__ import annotations

import logging
from datetime import date as Date
from typing import Any, Dict, Mapping, Set

import pendulum
import requests
from pendulum import DateTime

from ..domain.exceptions import CalendarAPIError, InvalidCabinError
from ..domain.models import Booking

logger = logging.getLogger(__name__)


class CabinWebhookClient:
    """
    Reads booked times from and pushes booking events to cabin webhooks.
    """

    def __init__(
        self,
        endpoints: Mapping[str, str],
        timezone: str = "Europe/Vilnius",
        timeout: float = 30.0,
    ):
        """
        Initialize the webhook client.

        Args:
            endpoints: Mapping of cabin id -> webhook URL
            timezone: IANA timezone the salon operates in
            timeout: Request timeout in seconds
        """
        self.endpoints = dict(endpoints)
        self.timezone = timezone
        self.timeout = timeout
        self.headers = {"Content-Type": "application/json"}

    def _endpoint_for(self, cabin_id: str) -> str:
        if not cabin_id:
            raise InvalidCabinError("Cabin id is required")
        url = self.endpoints.get(cabin_id)
        if not url:
            raise InvalidCabinError(f"No calendar webhook configured for cabin '{cabin_id}'")
        return url

    def fetch_booked_times(self, cabin_id: str, date: Date) -> Set[str]:
        """
        Get the "HH:MM" start times already booked for a cabin on a date.

        Args:
            cabin_id: Cabin identifier
            date: Day to query

        Returns:
            Set of booked start times in the salon timezone

        Raises:
            InvalidCabinError: If the cabin has no webhook (no request is made)
            CalendarAPIError: If the webhook call fails or returns invalid JSON
        """
        url = self._endpoint_for(cabin_id)

        try:
            response = requests.post(
                url,
                headers=self.headers,
                json={"date": date.isoformat()},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()

        except requests.exceptions.RequestException as e:
            raise CalendarAPIError(f"Failed to fetch time slots for {cabin_id}: {e}") from e
        except ValueError as e:
            raise CalendarAPIError(f"Invalid response from calendar webhook for {cabin_id}: {e}") from e

        return self._parse_booked_times(data, date)

    def _parse_booked_times(self, response_data: Any, date: Date) -> Set[str]:
        """
        Parse the webhook response into booked start times for ``date``.

        Response format:
        {
            "items": [
                {"start": {"dateTime": "2024-11-25T10:15:00+02:00"}},
                ...
            ]
        }
        """
        if not isinstance(response_data, dict):
            raise CalendarAPIError("Calendar webhook response must be a JSON object")

        items = response_data.get("items") or []
        if not isinstance(items, list):
            raise CalendarAPIError("Calendar webhook response 'items' must be a list")

        booked: Set[str] = set()

        for item in items:
            try:
                start = self._parse_datetime(item["start"]["dateTime"])
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Could not parse calendar event %r: %s", item, e)
                continue

            # Only include events on the requested day
            if start.date() == date:
                booked.add(start.format("HH:mm"))

        return booked

    def _parse_datetime(self, datetime_str: str) -> DateTime:
        """
        Parse an ISO 8601 string and convert it to the salon timezone.

        Strings without an offset are read as salon local time.
        """
        dt = pendulum.parse(datetime_str, tz=self.timezone)

        if isinstance(dt, DateTime):
            return dt.in_timezone(self.timezone)

        raise ValueError(f"Could not parse datetime: {datetime_str}")

    def notify_new_booking(self, booking: Booking) -> None:
        """
        Send a ``new_booking`` event to the cabin webhook.

        Skipped when the cabin has no webhook configured.

        Raises:
            CalendarAPIError: If the webhook call fails
        """
        payload = {
            "type": "new_booking",
            "booking": {**booking.to_record(), "id": booking.id},
        }
        self._send_event(booking.cabin_id, payload)

    def notify_cancellation(self, booking_id: str, cabin_id: str) -> None:
        """
        Send a ``cancel_booking`` event to the cabin webhook.

        Raises:
            CalendarAPIError: If the webhook call fails
        """
        payload = {"type": "cancel_booking", "bookingId": booking_id}
        self._send_event(cabin_id, payload)

    def _send_event(self, cabin_id: str, payload: Dict[str, Any]) -> None:
        url = self.endpoints.get(cabin_id)
        if not url:
            logger.debug("No webhook configured for cabin %s; skipping %s", cabin_id, payload["type"])
            return

        try:
            response = requests.post(
                url,
                headers=self.headers,
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise CalendarAPIError(
                f"Failed to send {payload['type']} event for {cabin_id}: {e}"
            ) from e

        logger.info("Sent %s event for cabin %s", payload["type"], cabin_id)
