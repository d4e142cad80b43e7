"""
Client for the booking confirmation endpoint.
"""

import logging

import pendulum
import requests

from ..domain.exceptions import NotificationError
from ..domain.models import BookingRequest, Cabin

logger = logging.getLogger(__name__)


class ConfirmationClient:
    """
    Posts confirmed bookings to the automation that emails the visitor and
    adds the visit to the salon calendar.
    """

    def __init__(self, url: str, timezone: str = "Europe/Vilnius", timeout: float = 30.0):
        self.url = url
        self.timezone = timezone
        self.timeout = timeout
        self.headers = {"Content-Type": "application/json"}

    def build_payload(self, request: BookingRequest, cabin: Cabin) -> dict:
        """
        Build the confirmation body.

        ``dateTime`` is local salon time without an offset; the zone is sent
        separately in ``timeZone``.
        """
        hour, minute = (int(part) for part in request.time.split(":"))
        local = pendulum.datetime(
            request.date.year,
            request.date.month,
            request.date.day,
            hour,
            minute,
            tz=self.timezone,
        )
        return {
            "fullName": request.full_name,
            "email": request.email,
            "dateTime": local.format("YYYY-MM-DD[T]HH:mm:ss"),
            "timeZone": self.timezone,
            "cabin": cabin.id,
            "cabinName": cabin.name,
        }

    def send_confirmation(self, request: BookingRequest, cabin: Cabin) -> None:
        """
        Send the confirmation for a booking request.

        Raises:
            NotificationError: If the endpoint is unreachable or answers non-2xx
        """
        if not self.url:
            raise NotificationError("No confirmation endpoint configured")

        payload = self.build_payload(request, cabin)

        try:
            response = requests.post(
                self.url,
                headers=self.headers,
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise NotificationError(f"Confirmation request failed: {e}") from e

        logger.info("Confirmation sent for %s %s %s", cabin.id, payload["dateTime"], request.email)
