"""
Domain models for cabins, opening hours, slots and bookings.
"""

from dataclasses import dataclass, field, replace
from datetime import date as Date
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Sequence

from .exceptions import BusinessHoursError, InvalidCabinError


class CabinCategory(str, Enum):
    """Kind of tanning cabin."""
    LYING = "lying"
    STANDING = "standing"


class BookingStatus(str, Enum):
    """Lifecycle status of a stored booking."""
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Cabin:
    """
    A bookable tanning cabin.
    """
    id: str
    name: str
    category: CabinCategory
    description: str = ""
    price_per_minute: float = 0.0

    def format_price(self) -> str:
        """Format the price for display, e.g. ``0.70 €/min``."""
        return f"{self.price_per_minute:.2f} €/min"


class CabinCatalog:
    """
    Read-only, ordered collection of cabins addressable by id.
    """

    def __init__(self, cabins: Sequence[Cabin]):
        self._cabins: Dict[str, Cabin] = {}
        for cabin in cabins:
            if cabin.id in self._cabins:
                raise ValueError(f"Duplicate cabin id: {cabin.id}")
            self._cabins[cabin.id] = cabin

    def __iter__(self) -> Iterator[Cabin]:
        return iter(self._cabins.values())

    def __len__(self) -> int:
        return len(self._cabins)

    def __contains__(self, cabin_id: object) -> bool:
        return cabin_id in self._cabins

    @property
    def ids(self) -> List[str]:
        return list(self._cabins)

    def get(self, cabin_id: Optional[str]) -> Cabin:
        """
        Look up a cabin by id.

        Raises:
            InvalidCabinError: If the id is blank or not in the catalog
        """
        if not cabin_id or not cabin_id.strip():
            raise InvalidCabinError("Cabin id is required")

        cabin = self._cabins.get(cabin_id.strip())
        if cabin is None:
            raise InvalidCabinError(f"Invalid cabin id: '{cabin_id}'")
        return cabin


@dataclass(frozen=True)
class OpeningHours:
    """
    Whole-hour opening window for one weekday.

    Invariant: 0 <= start_hour < end_hour <= 24.
    """
    start_hour: int
    end_hour: int

    def __post_init__(self):
        if not 0 <= self.start_hour < self.end_hour <= 24:
            raise ValueError(
                f"Opening hours must satisfy 0 <= start < end <= 24, "
                f"got {self.start_hour}-{self.end_hour}"
            )

    def __str__(self) -> str:
        return f"{self.start_hour:02d}:00 - {self.end_hour:02d}:00"


@dataclass(frozen=True)
class BusinessHours:
    """
    Opening hours per weekday (0=Monday, 6=Sunday).
    """
    hours: Dict[int, OpeningHours]

    def for_day(self, day: Date) -> OpeningHours:
        """
        Get the opening hours for the weekday of ``day``.

        Raises:
            BusinessHoursError: If the weekday has no opening hours
        """
        weekday = day.weekday()
        try:
            return self.hours[weekday]
        except KeyError:
            raise BusinessHoursError(
                f"No business hours configured for weekday {weekday} ({day.isoformat()})"
            ) from None


DEFAULT_BUSINESS_HOURS = BusinessHours(
    hours={
        0: OpeningHours(9, 20),
        1: OpeningHours(9, 20),
        2: OpeningHours(9, 20),
        3: OpeningHours(9, 20),
        4: OpeningHours(9, 20),
        5: OpeningHours(9, 16),
        6: OpeningHours(9, 14),
    }
)


@dataclass(frozen=True)
class TimeSlot:
    """
    A quarter-hour starting point on a given day and whether it can be booked.
    """
    time: str  # "HH:MM"
    available: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"time": self.time, "available": self.available}


@dataclass(frozen=True)
class BookingRequest:
    """
    Contact details and selection submitted by a visitor.
    """
    cabin_id: str
    date: Date
    time: str
    full_name: str
    email: str


@dataclass(frozen=True)
class Booking:
    """
    A persisted reservation of one slot.

    ``id`` is None when the booking was confirmed but could not be stored.
    """
    cabin_id: str
    date: Date
    time: str
    user_id: str
    user_email: str
    status: BookingStatus = BookingStatus.CONFIRMED
    created_at: str = ""
    updated_at: str = ""
    id: Optional[str] = None

    def with_id(self, booking_id: str) -> "Booking":
        return replace(self, id=booking_id)

    def to_record(self) -> Dict[str, Any]:
        """Serialize to the stored record shape (without the id)."""
        return {
            "cabin": self.cabin_id,
            "date": self.date.isoformat(),
            "time": self.time,
            "userId": self.user_id,
            "userEmail": self.user_email,
            "status": self.status.value,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_record(cls, booking_id: str, record: Dict[str, Any]) -> "Booking":
        """
        Build a booking from a stored record.

        Raises:
            KeyError: If a required key is missing
            ValueError: If the date or status is invalid
        """
        return cls(
            id=booking_id,
            cabin_id=record["cabin"],
            date=Date.fromisoformat(record["date"]),
            time=record["time"],
            user_id=record["userId"],
            user_email=record["userEmail"],
            status=BookingStatus(record["status"]),
            created_at=record.get("createdAt", ""),
            updated_at=record.get("updatedAt", ""),
        )


@dataclass
class AvailabilityResult:
    """
    Slots for one cabin and date, or the reason they could not be computed.

    An empty ``slots`` list with ``error`` set means the lookup failed,
    which is different from a day where every slot is taken.
    """
    cabin_id: str
    date: Date
    slots: List[TimeSlot] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def available_slots(self) -> List[TimeSlot]:
        return [slot for slot in self.slots if slot.available]

    @property
    def fully_booked(self) -> bool:
        return self.ok and bool(self.slots) and not self.available_slots

    def is_available(self, time: str) -> bool:
        return any(slot.time == time and slot.available for slot in self.slots)
