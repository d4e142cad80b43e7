"""
JSON file store for booking records.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..domain.exceptions import BookingNotFoundError, PersistenceError
from ..domain.models import Booking, BookingStatus

logger = logging.getLogger(__name__)


class JsonBookingStore:
    """
    Keeps booking records in a single JSON document keyed by booking id.

    File layout:
    {
        "bookings": {
            "<id>": {"cabin": ..., "date": ..., "time": ..., "status": ..., ...}
        }
    }
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> Dict[str, Dict[str, Any]]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceError(f"Could not read booking store {self.path}: {exc}") from exc

        bookings = raw.get("bookings") if isinstance(raw, dict) else None
        if not isinstance(bookings, dict):
            raise PersistenceError(f"Booking store {self.path} has an invalid layout")
        return bookings

    def _save(self, bookings: Dict[str, Dict[str, Any]]) -> None:
        folder = self.path.parent
        try:
            folder.mkdir(parents=True, exist_ok=True)
            # Atomic write
            with tempfile.NamedTemporaryFile(
                "w", delete=False, encoding="utf-8", dir=folder, suffix=".tmp"
            ) as tf:
                json.dump({"bookings": bookings}, tf, ensure_ascii=False, indent=2)
                tmp_name = tf.name
            os.replace(tmp_name, self.path)
        except OSError as exc:
            raise PersistenceError(f"Could not write booking store {self.path}: {exc}") from exc

    def create(self, record: Dict[str, Any]) -> str:
        """
        Store a new booking record.

        Returns:
            The generated booking id
        """
        bookings = self._load()
        booking_id = uuid.uuid4().hex
        bookings[booking_id] = dict(record)
        self._save(bookings)
        logger.debug("Stored booking %s in %s", booking_id, self.path)
        return booking_id

    def get(self, booking_id: str) -> Booking:
        """
        Raises:
            BookingNotFoundError: If the id is unknown
        """
        record = self._load().get(booking_id)
        if record is None:
            raise BookingNotFoundError(f"Booking not found: {booking_id}")
        return self._to_booking(booking_id, record)

    def update_status(self, booking_id: str, status: BookingStatus, updated_at: str) -> None:
        """
        Change the status of a stored booking.

        Raises:
            BookingNotFoundError: If the id is unknown
        """
        bookings = self._load()
        record = bookings.get(booking_id)
        if record is None:
            raise BookingNotFoundError(f"Booking not found: {booking_id}")

        record["status"] = status.value
        record["updatedAt"] = updated_at
        self._save(bookings)

    def list_by_user(self, user_id: str) -> List[Booking]:
        """Return all bookings made by a user, oldest slot first."""
        result: List[Booking] = []
        for booking_id, record in self._load().items():
            if record.get("userId") != user_id:
                continue
            booking = self._try_to_booking(booking_id, record)
            if booking is not None:
                result.append(booking)

        return sorted(result, key=lambda b: (b.date, b.time))

    def _to_booking(self, booking_id: str, record: Dict[str, Any]) -> Booking:
        try:
            return Booking.from_record(booking_id, record)
        except (KeyError, ValueError) as exc:
            raise PersistenceError(f"Invalid booking record {booking_id}: {exc}") from exc

    def _try_to_booking(self, booking_id: str, record: Dict[str, Any]) -> Optional[Booking]:
        try:
            return self._to_booking(booking_id, record)
        except PersistenceError as exc:
            logger.warning("Skipping stored booking: %s", exc)
            return None
